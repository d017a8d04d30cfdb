import copy

from django.test.runner import DiscoverRunner

from inelastic_mappings.catalog import AliasDefinition, IndexDefinition, SchemaCatalog
from inelastic_mappings.utils import merge

TEST_SETTINGS = {
    "index": {
        "number_of_shards": 1,
        "number_of_replicas": 0,
    },
}

COVER_MAPPING = {
    "properties": {
        "version": {
            "type": "keyword",
            "ignore_above": 1024,
        },
    },
}

RELEASE_MAPPING = {
    "dynamic": False,
    "properties": {
        "name": {"type": "keyword"},
        "date": {"type": "date"},
        "authorized": {"type": "boolean"},
    },
}

FILE_MAPPING = {
    "dynamic": False,
    "properties": {
        "path": {"type": "keyword"},
        "date": {"type": "date"},
    },
}


class MappingTestRunner(DiscoverRunner):
    """
    Runs the suite against the in-memory gateway; no database is needed.
    """
    def setup_databases(self, **kwargs):
        return []

    def teardown_databases(self, old_config, **kwargs):
        pass


def build_cover_catalog():
    """
    A catalog with the single index 'cover' and no aliases.
    """
    return SchemaCatalog(
        [IndexDefinition('cover', {'cover': COVER_MAPPING}, TEST_SETTINGS)],
        working_index='cover'
    )


def build_test_catalog():
    """
    A catalog with a versioned 'cpan_test' index behind the alias 'cpan'.
    """
    return SchemaCatalog(
        [
            IndexDefinition('cpan_test', {'release': RELEASE_MAPPING, 'file': FILE_MAPPING},
                            TEST_SETTINGS),
            IndexDefinition('cover', {'cover': COVER_MAPPING}, TEST_SETTINGS),
        ],
        [AliasDefinition('cpan', 'cpan_test')],
        working_index='cpan'
    )


class FakeBulkWriter:
    def __init__(self, gateway, index, doc_type, max_count):
        self.gateway = gateway
        self.index = index
        self.doc_type = doc_type
        self.max_count = max_count
        self.actions = []
        self.succeeded = 0
        self.ignored = 0
        self.rejected = 0

    def _add(self, action):
        self.actions.append(action)
        if len(self.actions) >= self.max_count:
            self.flush()

    def create(self, doc_id, source):
        self._add(('create', doc_id, source))

    def delete_ids(self, ids):
        self.gateway.delete_batches.append(list(ids))
        for doc_id in ids:
            self._add(('delete', doc_id, None))

    def flush(self):
        if not self.actions:
            return 0

        documents = self.gateway.get_documents(self.index, self.doc_type)
        succeeded = 0
        for (op_type, doc_id, source) in self.actions:
            if doc_id in self.gateway.reject_ids:
                self.rejected += 1
            elif op_type == 'create' and doc_id in documents:
                self.ignored += 1
            elif op_type == 'create':
                documents[doc_id] = copy.deepcopy(source)
                succeeded += 1
            elif documents.pop(doc_id, None) is None:
                self.ignored += 1
            else:
                succeeded += 1

        self.gateway.bulk_requests.append(len(self.actions))
        self.actions = []
        self.succeeded += succeeded
        return succeeded


class FakeGateway:
    """
    An in-memory stand-in for 'ClusterGateway'.

    Every call is recorded in 'calls'; 'fail_scroll' may be set to a
    callable receiving the scroll body and raising to simulate failures.
    Bulk actions on the ids in 'reject_ids' are rejected.
    """
    def __init__(self):
        self.indices = {}
        self.aliases = {}
        self.documents = {}
        self.calls = []
        self.delete_batches = []
        self.bulk_requests = []
        self.fail_scroll = None
        self.reject_ids = set()

    def resolve(self, name):
        return self.aliases.get(name, name)

    def get_documents(self, index, doc_type):
        return self.documents.setdefault((self.resolve(index), doc_type), {})

    def add_documents(self, index, doc_type, sources):
        documents = self.get_documents(index, doc_type)
        for (doc_id, source) in sources:
            documents[doc_id] = source

    def count(self, index, doc_type):
        return len(self.get_documents(index, doc_type))

    def ping(self):
        self.calls.append(('ping',))
        return True

    def exists(self, index):
        self.calls.append(('exists', index))
        return index in self.indices or index in self.aliases

    def create(self, index, body):
        self.calls.append(('create', index))
        self.indices[index] = {'settings': copy.deepcopy(body), 'mappings': {}}

    def delete(self, index):
        self.calls.append(('delete', index))
        del self.indices[index]
        self.aliases = dict((a, i) for a, i in self.aliases.items() if i != index)
        self.documents = dict((k, v) for k, v in self.documents.items() if k[0] != index)

    def put_mapping(self, index, doc_type, mapping):
        self.calls.append(('put_mapping', index, doc_type))
        mappings = self.indices[self.resolve(index)]['mappings']
        mappings[doc_type] = merge([mappings.get(doc_type, {}), copy.deepcopy(mapping)])

    def put_alias(self, index, alias):
        self.calls.append(('put_alias', index, alias))
        self.aliases[alias] = index

    def get_mapping(self):
        self.calls.append(('get_mapping',))
        return dict((name, copy.deepcopy(info['mappings'])) for name, info in self.indices.items())

    def get_aliases(self):
        self.calls.append(('get_aliases',))
        return dict((alias, {'index': index}) for alias, index in self.aliases.items())

    def health(self, wait_for_status=None, timeout=None):
        self.calls.append(('health',))
        return {'cluster_name': 'fake', 'status': 'green',
                'number_of_nodes': 1, 'active_shards': len(self.indices)}

    def indices_info(self):
        self.calls.append(('indices_info',))
        info = {}
        for name in self.indices:
            docs = sum(len(d) for (index, _), d in self.documents.items() if index == name)
            info[name] = {'health': 'green', 'status': 'open', 'docs_count': docs}
        return info

    def refresh(self):
        self.calls.append(('refresh',))

    def scroll(self, index, doc_type, body, size, ttl):
        self.calls.append(('scroll', index, doc_type))
        if self.fail_scroll is not None:
            self.fail_scroll(body)

        clauses = body['query']['bool']['filter']
        documents = self.get_documents(index, doc_type)
        for (doc_id, source) in sorted(documents.items()):
            if all(self.matches(source, clause) for clause in clauses):
                yield {'_id': doc_id, '_source': copy.deepcopy(source)}

    def matches(self, source, clause):
        ((name, params),) = clause.items()
        if name == 'match_all':
            return True
        if name == 'term':
            ((field, value),) = params.items()
            return source.get(field) == value
        if name == 'range':
            ((field, bounds),) = params.items()
            value = source.get(field)
            if value is None:
                return False
            # month bounds ('YYYY-MM') against full dates
            value = value[:len(bounds.get('gte', bounds.get('lt', '')))]
            return bounds.get('gte', value) <= value and value < bounds.get('lt', value + '~')
        raise ValueError("Unsupported clause '{}'".format(name))

    def bulk(self, index, doc_type, max_count):
        self.calls.append(('bulk', index, doc_type))
        return FakeBulkWriter(self, index, doc_type, max_count)
