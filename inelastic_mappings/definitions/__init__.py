"""
The compiled-in index definitions of the project.

Replace them by pointing 'ELASTICSEARCH_MAPPING_CATALOG' at another
callable returning a 'SchemaCatalog'.
"""
from django.conf import settings

from ..catalog import AliasDefinition, IndexDefinition, SchemaCatalog
from ..utils import merge
from .deploy_statement import DEPLOY_STATEMENT
from .contributor import CONTRIBUTOR
from .cover import COVER
from .cve import CVE
from . import cpan, user

CPAN_ALIAS = 'cpan'

# the cpan index carries nearly all documents
CPAN_SETTINGS = {
    "index": {
        "number_of_shards": 3,
    },
}


def build_catalog():
    cpan_index = getattr(settings, 'ELASTICSEARCH_CPAN_INDEX', 'cpan_v1_01')

    indices = [
        IndexDefinition(cpan_index, cpan.TYPES,
                        merge([DEPLOY_STATEMENT, CPAN_SETTINGS])),
        IndexDefinition('user', user.TYPES, DEPLOY_STATEMENT),
        IndexDefinition('contributor', {'contributor': CONTRIBUTOR}, DEPLOY_STATEMENT),
        IndexDefinition('cover', {'cover': COVER}, DEPLOY_STATEMENT),
        IndexDefinition('cve', {'cve': CVE}, DEPLOY_STATEMENT),
    ]
    aliases = [AliasDefinition(CPAN_ALIAS, cpan_index)]

    return SchemaCatalog(indices, aliases, working_index=CPAN_ALIAS)
