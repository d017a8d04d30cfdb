from django.apps import AppConfig


class MappingConfig(AppConfig):
    name = "inelastic_mappings"
    verbose_name = "Search mappings"
    default = True
