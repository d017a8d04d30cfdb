"""
Index settings shared by every index of the project.
"""

DEPLOY_STATEMENT = {
    "index": {
        "number_of_shards": 1,
        "number_of_replicas": 1,
        "refresh_interval": "1s",
    },
    "analysis": {
        "filter": {
            "edge_ngram": {
                "type": "edge_ngram",
                "min_gram": 1,
                "max_gram": 20,
            },
        },
        "analyzer": {
            "lowercase": {
                "type": "custom",
                "tokenizer": "keyword",
                "filter": ["lowercase"],
            },
            "fulltext": {
                "type": "english",
            },
            "camelcase": {
                "type": "pattern",
                "pattern": "\\::|([^\\p{L}\\d]+)|(?<=\\D)(?=\\d)|(?<=\\d)(?=\\D)|(?<=[\\p{L}&&[^\\p{Lu}]])(?=\\p{Lu})|(?<=\\p{Lu})(?=\\p{Lu}[\\p{L}&&[^\\p{Lu}]])",
            },
            "edge_camelcase": {
                "type": "custom",
                "tokenizer": "camelcase",
                "filter": ["lowercase", "edge_ngram"],
            },
            "edge": {
                "type": "custom",
                "tokenizer": "standard",
                "filter": ["lowercase", "edge_ngram"],
            },
        },
        "tokenizer": {
            "camelcase": {
                "type": "pattern",
                "pattern": "\\::|([^\\p{L}\\d]+)|(?<=\\D)(?=\\d)|(?<=\\d)(?=\\D)|(?<=[\\p{L}&&[^\\p{Lu}]])(?=\\p{Lu})|(?<=\\p{Lu})(?=\\p{Lu}[\\p{L}&&[^\\p{Lu}]])",
            },
        },
    },
}
