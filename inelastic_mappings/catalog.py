import functools
import logging
import copy

from django.utils.module_loading import import_string
from django.core.exceptions import ImproperlyConfigured
from django.conf import settings

logger = logging.getLogger(__name__)

DEFAULT_CATALOG = 'inelastic_mappings.definitions.build_catalog'


class IndexDefinition:
    """
    An index as the project expects it to be deployed: its settings
    ('deployment statement') and the mapping of each of its types.
    """
    def __init__(self, name, types, deployment_statement=None):
        self.name = name
        self._types = dict(types)
        self._deployment_statement = deployment_statement or {}

    def __repr__(self):
        return "<IndexDefinition: {} ({})>".format(
            self.name, ", ".join(self.get_type_names())
        )

    @property
    def types(self):
        return copy.deepcopy(self._types)

    @property
    def deployment_statement(self):
        return copy.deepcopy(self._deployment_statement)

    def get_type_names(self):
        return sorted(self._types)

    def get_type(self, doc_type):
        return copy.deepcopy(self._types[doc_type])


class AliasDefinition:
    def __init__(self, name, index):
        self.name = name
        self.index = index

    def __repr__(self):
        return "<AliasDefinition: {} -> {}>".format(self.name, self.index)


class SchemaCatalog:
    """
    Static registry of the indices and aliases of a project.

    The 'working index' names the index (or alias) which type-level
    operations (copy, empty, list) read from.
    """
    def __init__(self, indices, aliases=None, working_index=None):
        self.indices = dict((i.name, i) for i in indices)
        self.aliases = dict((a.name, a) for a in (aliases or []))
        self.working_index = working_index

        for alias in self.aliases.values():
            if alias.index not in self.indices:
                raise ImproperlyConfigured(
                    "Alias '{}' targets undefined index '{}'".format(alias.name, alias.index)
                )

    def get_index_names(self):
        return sorted(self.indices)

    def get_index(self, name):
        """
        Returns the definition named by 'name', resolving aliases.
        """
        if name in self.aliases:
            name = self.aliases[name].index
        try:
            return self.indices[name]
        except KeyError:
            raise KeyError("No index definition for '{}'".format(name))

    def get_working_index(self):
        if self.working_index is None:
            raise ImproperlyConfigured("Catalog declares no working index.")
        return self.get_index(self.working_index)

    def get_mappings(self):
        """
        Returns the expected '{index: {type: mapping}}' structure.
        """
        return dict((name, self.indices[name].types) for name in self.get_index_names())

    def get_aliases(self):
        return dict((name, self.aliases[name].index) for name in sorted(self.aliases))


@functools.lru_cache()
def _load_builder(dotted_path):
    return import_string(dotted_path)


def get_catalog():
    """
    Builds the catalog named by 'ELASTICSEARCH_MAPPING_CATALOG'.
    """
    dotted_path = getattr(settings, 'ELASTICSEARCH_MAPPING_CATALOG', DEFAULT_CATALOG)
    logger.debug("Building schema catalog from '{}'".format(dotted_path))
    catalog = _load_builder(dotted_path)()
    if not isinstance(catalog, SchemaCatalog):
        raise ImproperlyConfigured(
            "'{}' did not return a SchemaCatalog".format(dotted_path)
        )
    return catalog
