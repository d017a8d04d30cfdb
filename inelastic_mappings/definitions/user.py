from .fields import keyword, boolean, date, obj

ACCOUNT = {
    "dynamic": False,
    "properties": {
        "id": keyword(),
        "code": keyword(),
        "looks_human": boolean(),
        "passed_captcha": date(),
        "access_token": obj({
            "client": keyword(),
            "token": keyword(),
        }),
        "identity": obj({
            "key": keyword(),
            "name": keyword(),
        }),
    },
}

IDENTITY = {
    "dynamic": False,
    "properties": {
        "key": keyword(),
        "name": keyword(),
    },
}

SESSION = {
    "dynamic": False,
    "properties": {},
}

TYPES = {
    "account": ACCOUNT,
    "identity": IDENTITY,
    "session": SESSION,
}
