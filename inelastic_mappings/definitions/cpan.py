from .fields import keyword, analyzed, integer, long, boolean, date, obj


def _name_field():
    field = keyword()
    field["fields"] = {
        "analyzed": analyzed(store=True),
        "lowercase": analyzed("lowercase"),
        "camelcase": analyzed("camelcase"),
        "edge_camelcase": analyzed("edge_camelcase"),
        "edge": analyzed("edge"),
    }
    return field


def _dependency():
    return obj({
        "module": keyword(),
        "phase": keyword(),
        "relationship": keyword(),
        "version": keyword(),
        "version_numified": {"type": "float"},
    }, dynamic=False)


def _stat():
    return obj({
        "gid": long(),
        "mode": integer(),
        "mtime": integer(),
        "size": integer(),
        "uid": long(),
    })


AUTHOR = {
    "dynamic": False,
    "properties": {
        "asciiname": analyzed(fields={"keyword": keyword()}),
        "city": keyword(),
        "country": keyword(),
        "email": keyword(),
        "gravatar_url": keyword(),
        "is_pause_custodial_account": boolean(),
        "location": {"type": "geo_point"},
        "name": analyzed(fields={"keyword": keyword()}),
        "pauseid": keyword(),
        "profile": obj({
            "id": keyword(),
            "name": keyword(),
        }, dynamic=False),
        "region": keyword(),
        "updated": date(),
        "user": keyword(),
        "website": keyword(),
    },
}

_BUG_COUNTS = {
    "active": integer(),
    "closed": integer(),
    "open": integer(),
    "source": keyword(),
}

DISTRIBUTION = {
    "dynamic": False,
    "properties": {
        "name": keyword(),
        "bugs": obj({
            "github": obj(dict(_BUG_COUNTS)),
            "rt": obj(dict(_BUG_COUNTS, **{
                "new": integer(),
                "patched": integer(),
                "rejected": integer(),
                "resolved": integer(),
                "stalled": integer(),
            })),
        }),
        "river": obj({
            "bucket": integer(),
            "immediate": integer(),
            "total": integer(),
        }),
        "external_package": obj({
            "cygwin": keyword(),
            "debian": keyword(),
            "fedora": keyword(),
        }),
    },
}

FAVORITE = {
    "dynamic": False,
    "properties": {
        "author": keyword(),
        "date": date(),
        "distribution": keyword(),
        "id": keyword(),
        "release": keyword(),
        "user": keyword(),
    },
}

FILE = {
    "dynamic": False,
    "properties": {
        "abstract": analyzed("fulltext", fields={"analyzed": analyzed("fulltext")}),
        "author": keyword(),
        "authorized": boolean(),
        "binary": boolean(),
        "date": date(),
        "deprecated": boolean(),
        "description": analyzed(),
        "dir": keyword(),
        "directory": boolean(),
        "dist_fav_count": integer(),
        "distribution": _name_field(),
        "documentation": _name_field(),
        "id": keyword(),
        "indexed": boolean(),
        "level": integer(),
        "maturity": keyword(),
        "mime": keyword(),
        "module": {
            "type": "nested",
            "include_in_root": True,
            "properties": {
                "associated_pod": keyword(),
                "authorized": boolean(),
                "indexed": boolean(),
                "name": _name_field(),
                "version": keyword(),
                "version_numified": {"type": "float"},
            },
        },
        "name": keyword(),
        "path": keyword(),
        "pod": analyzed("fulltext", fields={"analyzed": analyzed("fulltext")}),
        "pod_lines": {"type": "integer", "index": False},
        "release": keyword(),
        "sloc": integer(),
        "slop": integer(),
        "stat": _stat(),
        "status": keyword(),
        "suggest": {
            "type": "completion",
            "analyzer": "simple",
            "max_input_length": 50,
        },
        "version": keyword(),
        "version_numified": {"type": "float"},
    },
}

MIRROR = {
    "dynamic": False,
    "properties": {
        "aka_name": keyword(),
        "ccode": keyword(),
        "city": keyword(),
        "contact": obj({
            "contact_site": keyword(),
            "contact_user": keyword(),
        }, dynamic=False),
        "continent": keyword(),
        "country": keyword(),
        "dnsrr": boolean(),
        "freq": keyword(),
        "ftp": keyword(),
        "http": keyword(),
        "inceptdate": date(),
        "location": {"type": "geo_point"},
        "name": keyword(),
        "org": keyword(),
        "region": keyword(),
        "reitredate": date(),
        "rsync": keyword(),
        "src": keyword(),
        "tz": keyword(),
    },
}

PERMISSION = {
    "dynamic": False,
    "properties": {
        "co_maintainers": keyword(),
        "module_name": keyword(),
        "owner": keyword(),
    },
}

PACKAGE = {
    "dynamic": False,
    "properties": {
        "author": keyword(),
        "dist_version": keyword(),
        "distribution": keyword(),
        "file": keyword(),
        "module_name": keyword(),
        "version": keyword(),
    },
}

RATING = {
    "dynamic": False,
    "properties": {
        "author": keyword(),
        "date": date(),
        "details": obj({
            "documentation": keyword(),
        }, dynamic=False),
        "distribution": keyword(),
        "helpful": obj({
            "user": keyword(),
            "value": boolean(),
        }, dynamic=False),
        "rating": {"type": "float"},
        "release": keyword(),
        "user": keyword(),
    },
}

RELEASE = {
    "dynamic": False,
    "properties": {
        "abstract": analyzed("fulltext", fields={"analyzed": analyzed("fulltext")}),
        "archive": keyword(),
        "author": keyword(),
        "authorized": boolean(),
        "changes_file": keyword(),
        "checksum_md5": keyword(),
        "checksum_sha256": keyword(),
        "date": date(),
        "dependency": _dependency(),
        "deprecated": boolean(),
        "distribution": _name_field(),
        "first": boolean(),
        "id": keyword(),
        "license": keyword(),
        "main_module": keyword(),
        "maturity": keyword(),
        "name": _name_field(),
        "provides": keyword(),
        "resources": obj({
            "bugtracker": obj({
                "mailto": keyword(),
                "web": keyword(),
            }),
            "homepage": keyword(),
            "license": keyword(),
            "repository": obj({
                "type": keyword(),
                "url": keyword(),
                "web": keyword(),
            }),
        }),
        "stat": _stat(),
        "status": keyword(),
        "tests": obj({
            "fail": integer(),
            "na": integer(),
            "pass": integer(),
            "unknown": integer(),
        }, dynamic=False),
        "version": keyword(),
        "version_numified": {"type": "float"},
    },
}

TYPES = {
    "author": AUTHOR,
    "distribution": DISTRIBUTION,
    "favorite": FAVORITE,
    "file": FILE,
    "mirror": MIRROR,
    "permission": PERMISSION,
    "package": PACKAGE,
    "rating": RATING,
    "release": RELEASE,
}
