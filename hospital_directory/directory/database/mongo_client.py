import os
from typing import Any, Dict, Iterable, List, Optional

from dotenv import load_dotenv
from pymongo import MongoClient

from directory.cms.graph_loader import parse_hospitals
from directory.errors import GraphFetchError
from directory.logger import logger
from directory.models.hospital_model import HospitalModel

load_dotenv()


class MongoGraphSource:
    """Hospital graph snapshot stored in MongoDB, one document per hospital."""

    SOURCE = "mongo"

    def __init__(self, test_db: bool = False, client: Optional[MongoClient] = None) -> None:
        if client is None:
            mongo_uri = os.getenv("MONGO_URI")
            if not mongo_uri:
                raise ValueError("MONGO_URI missing in .env")
            client = MongoClient(mongo_uri)

        self.client = client
        # Use test database if requested
        db_name = "hospital_directory_test" if test_db else "hospital_directory"
        self.db = self.client[db_name]
        self.hospitals = self.db["hospitals"]

    def fetch_hospital_graph(self) -> List[HospitalModel]:
        try:
            # Stored order keeps traversal deterministic
            records = list(self.hospitals.find({}).sort("_order", 1))
        except Exception as exc:  # noqa: BLE001
            raise GraphFetchError(self.SOURCE, f"cannot read hospitals collection: {exc}", exc) from exc

        for record in records:
            record.pop("_order", None)
            if "_id" in record:
                record["_id"] = str(record["_id"])
        hospitals = parse_hospitals(records)
        logger.info("Loaded {} hospitals from MongoDB ({})", len(hospitals), self.db.name)
        return hospitals

    def replace_graph(self, records: Iterable[Dict[str, Any]]) -> int:
        """Replace the stored snapshot with `records`; returns the number stored."""
        docs = []
        for order, record in enumerate(records):
            doc = dict(record)
            if "_id" not in doc and doc.get("id"):
                doc["_id"] = doc["id"]
            doc["_order"] = order
            docs.append(doc)

        self.hospitals.delete_many({})
        if docs:
            self.hospitals.insert_many(docs)
        logger.info("Stored {} hospitals in {}", len(docs), self.db.name)
        return len(docs)

    def close(self) -> None:
        self.client.close()
