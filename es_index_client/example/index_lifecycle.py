"""Create an index, add a document, inspect failures, and clean up."""

import logging

from es_index_client import (
    CallContext,
    UnexpectedStatusCodeError,
    create_client_from_config,
    load_config,
)

INDEX_NAME = "example-topics"

INDEX_SETTINGS = {
    "settings": {"number_of_shards": 1, "number_of_replicas": 0},
    "mappings": {
        "properties": {
            "title": {"type": "text"},
            "release_date": {"type": "date"},
        }
    },
}


def main() -> None:
    logging.basicConfig(level=logging.INFO)
    config = load_config(indexes=[INDEX_NAME])

    with create_client_from_config(config) as client:
        status = client.create_index(INDEX_NAME, INDEX_SETTINGS)
        print(f"Index created: {INDEX_NAME} ({status})")

        status = client.add_document(
            INDEX_NAME,
            "_doc",
            "cpi-2024-01",
            {"title": "Consumer price inflation", "release_date": "2024-01-17"},
            ctx=CallContext(timeout=10),
        )
        print(f"Document stored ({status})")

        try:
            client.create_index(INDEX_NAME, INDEX_SETTINGS)
        except UnexpectedStatusCodeError as err:
            print(f"Second create rejected with {err.status_code}")

        status = client.delete_index(INDEX_NAME)
        print(f"Cleanup complete ({status})")


if __name__ == "__main__":
    main()
