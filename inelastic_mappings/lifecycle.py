import logging
import json

from .comparison import mappings_valid
from .exceptions import (
    ArgumentError,
    ClusterUnavailable,
    IndexExists,
    MissingIndex,
    OperationCancelled,
    OperationNotPermitted,
)
from .reindex import Reindexer, parse_query

logger = logging.getLogger(__name__)

# runtime environments in which every index of the cluster may be deleted
DEVELOPMENT_ENVIRONMENTS = ('development', 'testing')


def always_confirm(message):
    return True


def parse_mapping(text):
    """
    Parses a '{type: mapping}' patch given as JSON.
    """
    if not text:
        return {}

    try:
        patch = json.loads(text)
    except ValueError as exc:
        raise ArgumentError("Malformed patch mapping: {!s}".format(exc))

    if not isinstance(patch, dict) or not all(isinstance(m, dict) for m in patch.values()):
        raise ArgumentError("Patch mapping must map type names to mappings.")

    return patch


class MappingManager:
    """
    Deploys, verifies and alters the indices of a schema catalog.

    Destructive operations ask 'confirm' (a callable taking the warning
    message and returning a boolean) before touching the cluster.
    """
    health_status = 'yellow'
    health_timeout = '30s'

    def __init__(self, gateway, catalog, confirm=always_confirm,
                 environment='production', harness_active=False, health_timeout=None):
        self.gateway = gateway
        self.catalog = catalog
        self.confirm = confirm
        self.environment = environment
        self.harness_active = harness_active
        if health_timeout is not None:
            self.health_timeout = health_timeout

    def get_reindexer(self):
        return Reindexer(self.gateway, self.catalog.working_index)

    def are_you_sure(self, message):
        if not self.confirm(message):
            raise OperationCancelled("Operation cancelled: {}".format(message))

    def check_index_exists(self, name, expected):
        exists = self.gateway.exists(name)

        if exists and not expected:
            logger.error("Index already exists: {}".format(name))
            raise IndexExists(name)

        if not exists and expected:
            logger.error("Index doesn't exist: {}".format(name))
            raise MissingIndex(name)

    def await_cluster(self):
        if not self.gateway.ping():
            raise ClusterUnavailable("Elasticsearch cluster is not reachable.")

    def check_health(self, refresh=False):
        health = self.gateway.health(
            wait_for_status=self.health_status, timeout=self.health_timeout
        )
        if refresh:
            self.gateway.refresh()
        return health

    def is_development(self):
        return self.harness_active or self.environment in DEVELOPMENT_ENVIRONMENTS

    def _delete_index(self, name):
        logger.info("Deleting index: {}".format(name))
        self.gateway.delete(name)

    def delete_index(self, name):
        self.check_index_exists(name, expected=True)
        self.are_you_sure("Index {} will be deleted !!!".format(name))

        self._delete_index(name)

    def check_permitted(self):
        if not self.is_development():
            logger.error("Operation not permitted!")
            raise OperationNotPermitted(self.environment)

    def delete_all(self):
        self.check_permitted()

        self.are_you_sure("ALL indices of the cluster will be deleted !!!")
        names = sorted(self.gateway.indices_info())
        for name in names:
            self._delete_index(name)

        return names

    def create_index(self, name, patch_mapping=None, skip_existing=False, reindex=False):
        """
        Creates an index with the settings of the working index.

        Types of 'patch_mapping' replace the catalog's definitions. With
        'reindex', the documents of all other types are copied from the
        working index; patched types are left empty to be filled later.
        """
        self.check_index_exists(name, expected=False)

        patch_mapping = patch_mapping or {}
        definition = self.catalog.get_working_index()
        deployment_statement = definition.deployment_statement
        deployment_statement.pop('mappings', None)

        mapping = {} if skip_existing else definition.types
        for doc_type in sorted(patch_mapping):
            logger.info("Patching mapping for type: {}".format(doc_type))
            mapping[doc_type] = patch_mapping[doc_type]

        logger.info("Creating index: {}".format(name))
        self.gateway.create(name, deployment_statement)

        for doc_type in sorted(mapping):
            logger.info("Adding mapping to index: {}".format(doc_type))
            self.gateway.put_mapping(name, doc_type, mapping[doc_type])

        reports = {}
        if reindex:
            for doc_type in sorted(t for t in mapping if t not in patch_mapping):
                logger.info("Re-indexing data to index {} from type: {}".format(name, doc_type))
                reports[doc_type] = self.copy_type(name, doc_type)

        if patch_mapping:
            logger.info(
                "Done. you can now fill the data for the altered types: ({})".format(
                    ",".join(sorted(patch_mapping)))
            )

        return reports

    def update_index(self, name, patch_mapping):
        self.check_index_exists(name, expected=True)
        if not patch_mapping:
            raise ArgumentError("update_index requires patch_mapping")

        self.are_you_sure("Index {} will be updated !!!".format(name))

        logger.info("Updating mapping for index: {}".format(name))
        for doc_type in sorted(patch_mapping):
            logger.info("Adding mapping to index: {}".format(doc_type))
            self.gateway.put_mapping(name, doc_type, patch_mapping[doc_type])

        logger.info("Done.")

    def copy_type(self, index, doc_type, query=None):
        """
        Copies the documents of 'doc_type' from the working index to 'index'.

        'query' is 'match_all', the JSON of a query clause or empty; without
        a query documents are copied month by month.
        """
        self.check_index_exists(index, expected=True)
        if not doc_type:
            raise ArgumentError("can't copy without a type")

        report = self.get_reindexer().copy(index, doc_type, parse_query(query))
        if report.ok:
            logger.info("Copied type '{}': {}".format(doc_type, report.summary()))
        else:
            logger.warning("Copied type '{}': {}".format(doc_type, report.summary()))

        return report

    def empty_type(self, doc_type):
        if not doc_type:
            raise ArgumentError("can't empty without a type")

        index = self.catalog.working_index
        self.are_you_sure("All documents of type {} in {} will be deleted !!!".format(
            doc_type, index))

        logger.info("Emptying type: {}".format(doc_type))
        deleted = self.get_reindexer().empty(doc_type)
        logger.info("Deleted {} documents of type {}".format(deleted, doc_type))

        return deleted

    def deploy_mapping(self):
        """
        Deletes and re-creates every catalog index and alias, then verifies
        the result. A failed verification is reported, not rolled back.
        """
        self.are_you_sure("this will delete EVERYTHING and re-create the (empty) indexes")

        for name in self.catalog.get_index_names():
            definition = self.catalog.indices[name]
            if self.gateway.exists(name):
                self._delete_index(name)

            logger.info("Creating index: {}".format(name))
            self.gateway.create(name, definition.deployment_statement)

            for doc_type, mapping in sorted(definition.types.items()):
                logger.info("Adding mapping: {}/{}".format(name, doc_type))
                self.gateway.put_mapping(name, doc_type, mapping)

        for alias, index in self.catalog.get_aliases().items():
            logger.info("Creating alias: '{}' -> '{}'".format(alias, index))
            self.gateway.put_alias(index, alias)

        self.check_health(refresh=True)
        result = self.verify()

        logger.info("Done.")
        return result

    def verify(self):
        return mappings_valid(
            self.gateway.get_mapping(),
            self.catalog.get_mappings(),
            self.gateway.get_aliases(),
            self.catalog.get_aliases()
        )

    def list_types(self):
        return self.catalog.get_working_index().get_type_names()

    def show_info(self):
        return {
            'cluster_info': self.gateway.health(),
            'indices_info': self.gateway.indices_info(),
            'aliases_info': self.gateway.get_aliases(),
        }
