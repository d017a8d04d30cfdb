import logging
import json

from elasticsearch import exceptions

from django.core.management.base import BaseCommand, CommandError
from django.conf import settings

from inelastic_mappings.catalog import get_catalog
from inelastic_mappings.exceptions import ArgumentError, MappingError, VerificationFailure
from inelastic_mappings.gateway import get_gateway
from inelastic_mappings.lifecycle import MappingManager, parse_mapping

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    """
    Sets up the indices and the type mappings of the schema catalog.

    Examples::

        manage.py mapping --show-cluster-info
        manage.py mapping --delete [--all]
        manage.py mapping --verify
        manage.py mapping --create-index xxx --reindex --patch-mapping '{"distribution": {...}}'
        manage.py mapping --copy-to-index xxx --copy-type release --copy-query match_all
        manage.py mapping --delete-from-type xxx
    """
    help = "Deploys, verifies and alters the search indices and their type mappings."

    def add_arguments(self, parser):
        actions = parser.add_mutually_exclusive_group(required=True)
        actions.add_argument('--show-cluster-info', action='store_true', dest='show_cluster_info',
                             help='Show basic info about cluster, indices and aliases.')
        actions.add_argument('--delete', action='store_true', dest='deploy_mapping',
                             help='Delete and re-create every index and alias, then verify them.')
        actions.add_argument('--verify', action='store_true', dest='verify',
                             help='Verify deployed index structure against definition.')
        actions.add_argument('--list-types', action='store_true', dest='list_types',
                             help='List available index type names.')
        actions.add_argument('--delete-index', action='store', dest='delete_index', default='',
                             help='Delete an existing index.')
        actions.add_argument('--create-index', action='store', dest='create_index', default='',
                             help='Create a new empty index (copy mappings).')
        actions.add_argument('--update-index', action='store', dest='update_index', default='',
                             help='Update existing index (add mappings).')
        actions.add_argument('--copy-to-index', action='store', dest='copy_to_index', default='',
                             help='Index to copy type to.')
        actions.add_argument('--delete-from-type', action='store', dest='delete_from_type',
                             default='', help='Delete data from an existing type.')

        parser.add_argument('--all', action='store_true', dest='delete_all',
                            help='Delete ALL existing indices (only with "--delete").')
        parser.add_argument('--patch-mapping', action='store', dest='patch_mapping', default='',
                            help='Type mapping patches, as JSON.')
        parser.add_argument('--skip-existing-mapping', action='store_true',
                            dest='skip_existing_mapping',
                            help='Do NOT copy mappings other than patch mapping.')
        parser.add_argument('--reindex', action='store_true', dest='reindex',
                            help='Reindex data from source index for unaltered types.')
        parser.add_argument('--copy-type', action='store', dest='copy_type', default='',
                            help='Type to copy.')
        parser.add_argument('--copy-query', action='store', dest='copy_query', default='',
                            help='Match query (default: monthly time slices); '
                                 'if provided must be a valid JSON query OR "match_all".')
        parser.add_argument('--connection', action='store', dest='connection', default=None,
                            help='Name of the Elasticsearch connection to use.')
        parser.add_argument('--noinput', '--no-input', action='store_false', dest='interactive',
                            help='Do NOT prompt the user for input of any kind.')

    def confirm(self, message):
        if not self.interactive:
            return True

        answer = input(
            "{}\nAre you sure you want to do this?\n\n"
            "    Type 'yes' to continue, or 'no' to cancel: ".format(message)
        )
        return answer == 'yes'

    def get_manager(self, connection):
        return MappingManager(
            get_gateway(connection),
            get_catalog(),
            confirm=self.confirm,
            environment=getattr(settings, 'ELASTICSEARCH_RUNTIME_ENVIRONMENT', 'production'),
            harness_active=getattr(settings, 'ELASTICSEARCH_TEST_HARNESS', False),
            health_timeout=getattr(settings, 'ELASTICSEARCH_HEALTH_TIMEOUT', None)
        )

    def handle(self, *args, **options):
        self.interactive = options['interactive']
        manager = self.get_manager(options['connection'])

        try:
            self.check_arguments(manager, options)
            manager.await_cluster()
            self.handle_action(manager, options)
        except MappingError as exc:
            logger.error(str(exc))
            raise CommandError(str(exc), returncode=exc.exit_code)
        except exceptions.ElasticsearchException as exc:
            logger.error("Elasticsearch request failed: {!s}".format(exc))
            raise CommandError("Elasticsearch request failed: {!s}".format(exc))

    def check_arguments(self, manager, options):
        if options['delete_all'] and not options['deploy_mapping']:
            raise ArgumentError('"--all" is only effective in combination with "--delete"')
        if options['delete_all']:
            manager.check_permitted()

    def handle_action(self, manager, options):
        if options['delete_index']:
            manager.delete_index(options['delete_index'])
        elif options['create_index']:
            reports = manager.create_index(
                options['create_index'],
                patch_mapping=parse_mapping(options['patch_mapping']),
                skip_existing=options['skip_existing_mapping'],
                reindex=options['reindex']
            )
            for report in reports.values():
                self.check_copy(report)
        elif options['update_index']:
            manager.update_index(
                options['update_index'], parse_mapping(options['patch_mapping'])
            )
        elif options['copy_to_index']:
            report = manager.copy_type(
                options['copy_to_index'], options['copy_type'], options['copy_query']
            )
            self.check_copy(report)
        elif options['delete_from_type']:
            manager.empty_type(options['delete_from_type'])
        elif options['deploy_mapping']:
            if options['delete_all']:
                manager.check_health()
                manager.delete_all()
            self.check_verification(
                manager.deploy_mapping(), "Indices Re-creation has failed!"
            )
        elif options['verify']:
            manager.check_health()
            self.check_verification(manager.verify(), "Indices Verification has failed!")
        elif options['list_types']:
            for name in manager.list_types():
                self.stdout.write(name)
        elif options['show_cluster_info']:
            manager.check_health()
            self.stdout.write(json.dumps(manager.show_info(), indent=4, sort_keys=True))

    def check_copy(self, report):
        self.stdout.write(report.summary())
        if not report.ok:
            raise MappingError(
                "Copy incomplete, re-run the failed slices: {}".format(report.summary())
            )

    def check_verification(self, result, message):
        if result.matched:
            self.stdout.write(self.style.SUCCESS("Verification: ok"))
            return

        for mismatch in result.mismatches:
            self.stderr.write(str(mismatch))
        raise VerificationFailure(message, result)
