from itertools import chain


def merge(items, overwrite=True):
    """
    Recursively merges a list of settings dictionaries.

    Lists are ordered settings (analyzer filter chains, etc.) and are
    therefore replaced, never concatenated.
    """
    if not items:
        return {}

    if len(items) == 1:
        return items[0]

    if all(isinstance(i, dict) for i in items):
        # Merge dictionaries by recursively merging each key.
        keys = dict.fromkeys(chain.from_iterable(i.keys() for i in items))
        return dict((k, merge([i[k] for i in items if k in i], overwrite)) for k in keys)
    else:
        if overwrite:
            # Merge other values by selecting the last one.
            return items[-1]
        raise ValueError("Collision while merging. Values: %s" % items)
