"""
Document store access.

Paths are slash-separated Firestore paths, e.g. ``customers/{uid}`` for a
document or ``customers/{uid}/payment_methods`` for a collection. Writes are
single-document; there are no transactions.
"""
import structlog

logger = structlog.get_logger(__name__)

DEFAULT_PAGE_SIZE = 10


class DocumentStore:
    def __init__(self, client):
        self.client = client

    def get(self, path: str):
        snapshot = self.client.document(path).get()
        if not snapshot.exists:
            return None
        return snapshot.to_dict()

    def set(self, path: str, data: dict, merge: bool = False):
        self.client.document(path).set(data, merge=merge)

    def delete(self, path: str):
        self.client.document(path).delete()

    def new_id(self, collection: str) -> str:
        return self.client.collection(collection).document().id

    def list_documents(self, collection: str, limit: int) -> dict:
        query = self.client.collection(collection).limit(limit)
        return {snapshot.id: snapshot.to_dict() for snapshot in query.stream()}

    def delete_many(self, collection: str, ids):
        batch = self.client.batch()
        for doc_id in ids:
            batch.delete(self.client.collection(collection).document(doc_id))
        batch.commit()

    def delete_collection(self, collection: str, page_size: int = DEFAULT_PAGE_SIZE) -> int:
        """Delete every document in ``collection`` one page at a time.

        Returns the number of deleted documents.
        """
        if page_size < 1:
            raise ValueError("page_size must be positive")

        deleted = 0
        while True:
            ids = list(self.list_documents(collection, page_size))
            if not ids:
                break
            self.delete_many(collection, ids)
            deleted += len(ids)

        logger.info("collection_deleted", collection=collection, count=deleted)
        return deleted
