from .fields import keyword, obj

COVER = {
    "dynamic": False,
    "properties": {
        "distribution": keyword(),
        "release": keyword(),
        "version": keyword(),
        "criteria": obj({
            "branch": {"type": "float"},
            "condition": {"type": "float"},
            "statement": {"type": "float"},
            "subroutine": {"type": "float"},
            "total": {"type": "float"},
        }),
        "url": keyword(),
    },
}
