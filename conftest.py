from django.conf import settings

from inelastic_mappings.tests.settings import SETTINGS


def pytest_configure(config):
    if not settings.configured:
        settings.configure(**SETTINGS)

        from django import setup
        setup()
