import threading
import logging

from elasticsearch.helpers import bulk, scan
from elasticsearch import Elasticsearch

from django.conf import settings

logger = logging.getLogger(__name__)

CACHE = threading.local()

# (operation, status) pairs of bulk errors leaving the expected state in place
BENIGN_ERRORS = {('create', 409), ('delete', 404)}


def get_client(connection):
    clients = getattr(CACHE, 'es_clients', None)
    if clients is None:
        clients = {}
        setattr(CACHE, 'es_clients', clients)

    if connection not in clients:
        config = settings.ELASTICSEARCH_CONNECTIONS[connection]
        (host_list, options) = (config.get('HOSTS', []),
                                config.get('CONNECTION_OPTIONS', {}))
        clients[connection] = Elasticsearch(hosts=host_list, **options)

    return clients[connection]


def get_gateway(connection=None):
    if connection is None:
        connection = getattr(settings, 'ELASTICSEARCH_DEFAULT_CONNECTION', 'default')
    return ClusterGateway(get_client(connection))


class BulkWriter:
    """
    Buffers bulk actions against one index/type and sends them in batches
    of at most 'max_count' actions.

    Outcomes accumulate over every batch: 'succeeded', 'ignored' for
    'create' conflicts (409) and 'delete' misses (404), which leave the
    existing state in place, and 'rejected' for any other error.
    """
    def __init__(self, client, index, doc_type, max_count):
        self.client = client
        self.index = index
        self.doc_type = doc_type
        self.max_count = max_count
        self.actions = []
        self.succeeded = 0
        self.ignored = 0
        self.rejected = 0

    def _add(self, action):
        action.update({'_index': self.index, '_type': self.doc_type})
        self.actions.append(action)
        if len(self.actions) >= self.max_count:
            self.flush()

    def create(self, doc_id, source):
        self._add({'_op_type': 'create', '_id': doc_id, '_source': source})

    def delete_ids(self, ids):
        for doc_id in ids:
            self._add({'_op_type': 'delete', '_id': doc_id})

    def flush(self):
        if not self.actions:
            return 0

        (actions, self.actions) = (tuple(self.actions), [])
        logger.debug("Sending {} bulk actions to '{}/{}'".format(
            len(actions), self.index, self.doc_type))

        (succeeded, errors) = bulk(
            client=self.client,
            actions=actions,
            chunk_size=self.max_count,
            raise_on_error=False,
            stats_only=False
        )
        self.succeeded += succeeded

        rejected = 0
        for error in errors:
            ((op_type, info),) = error.items()
            if (op_type, info.get('status')) in BENIGN_ERRORS:
                self.ignored += 1
                continue
            rejected += 1
            logger.debug("Rejected {} of '{}': {}".format(
                op_type, info.get('_id'), info.get('error')))

        if rejected:
            logger.warning("{} of {} bulk actions on '{}/{}' were rejected".format(
                rejected, len(actions), self.index, self.doc_type))
        self.rejected += rejected
        return succeeded


class ClusterGateway:
    """
    The cluster operations mapping management needs, over one client.
    """
    def __init__(self, client):
        self.client = client

    def ping(self):
        return self.client.ping()

    def exists(self, index):
        return self.client.indices.exists(index=index)

    def create(self, index, body):
        logger.debug("Creating index '{}': {}".format(index, body))
        self.client.indices.create(index=index, body=body)

    def delete(self, index):
        self.client.indices.delete(index=index)

    def put_mapping(self, index, doc_type, mapping):
        logger.debug("Putting mapping '{}/{}': {}".format(index, doc_type, mapping))
        self.client.indices.put_mapping(
            index=index,
            doc_type=doc_type,
            body=mapping
        )

    def put_alias(self, index, alias):
        self.client.indices.put_alias(index=index, name=alias)

    def get_mapping(self):
        """
        Returns the mappings of every index as '{index: {type: mapping}}'.
        """
        response = self.client.indices.get_mapping()
        return dict(
            (index, info.get('mappings', {})) for index, info in response.items()
        )

    def get_aliases(self):
        """
        Returns every alias as '{alias: {"index": name}}'.
        """
        aliases = {}
        for index, info in self.client.indices.get_alias().items():
            for alias in info.get('aliases', {}):
                aliases[alias] = {'index': index}
        return aliases

    def health(self, wait_for_status=None, timeout=None):
        params = {}
        if wait_for_status is not None:
            params['wait_for_status'] = wait_for_status
        if timeout is not None:
            params['timeout'] = timeout
        return self.client.cluster.health(**params)

    def indices_info(self):
        """
        Returns health, status and document count of every index.
        """
        info = {}
        for row in self.client.cat.indices(format='json'):
            info[row['index']] = {
                'health': row.get('health'),
                'status': row.get('status'),
                'docs_count': int(row.get('docs.count') or 0),
            }
        return info

    def refresh(self):
        self.client.indices.refresh()

    def scroll(self, index, doc_type, body, size, ttl):
        """
        Yields every hit matching 'body', page by page.
        """
        return scan(
            self.client,
            query=body,
            index=index,
            doc_type=doc_type,
            size=size,
            scroll=ttl
        )

    def bulk(self, index, doc_type, max_count):
        return BulkWriter(self.client, index, doc_type, max_count)
