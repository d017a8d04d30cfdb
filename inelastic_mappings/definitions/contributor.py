from .fields import keyword

CONTRIBUTOR = {
    "dynamic": False,
    "properties": {
        "distribution": keyword(),
        "pauseid": keyword(),
        "release_author": keyword(),
        "release_name": keyword(),
    },
}
