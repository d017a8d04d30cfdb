from .fields import keyword, analyzed, date

CVE = {
    "dynamic": False,
    "properties": {
        "cpansa_id": keyword(),
        "affected_versions": keyword(),
        "cves": keyword(),
        "description": analyzed(),
        "distribution": keyword(),
        "releases": keyword(),
        "reported": date(),
        "severity": keyword(),
        "versions": keyword(),
        "references": keyword(),
    },
}
