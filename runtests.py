import sys

from django.conf import settings

from inelastic_mappings.tests.settings import SETTINGS

settings.configure(**SETTINGS)

from django import setup
setup()


from inelastic_mappings.tests.base import MappingTestRunner
test_runner = MappingTestRunner(verbosity=1)
failures = test_runner.run_tests(['inelastic_mappings.tests'])
if failures:
    sys.exit(failures)
