"""
Builders for the field definitions repeated across type mappings.
"""

DATE_FORMAT = "strict_date_optional_time||epoch_millis"


def keyword(ignore_above=2048):
    return {"type": "keyword", "ignore_above": ignore_above}


def analyzed(analyzer="standard", **extra):
    field = {"type": "text", "analyzer": analyzer}
    field.update(extra)
    return field


def integer():
    return {"type": "integer"}


def long():
    return {"type": "long"}


def boolean():
    return {"type": "boolean"}


def date():
    return {"type": "date", "format": DATE_FORMAT}


def obj(properties, dynamic=True):
    return {"dynamic": dynamic, "properties": properties}
