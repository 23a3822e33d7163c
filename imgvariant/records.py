"""
Image record store.
"""

import logging
import threading
import uuid
from typing import Dict, Optional

from imgvariant.models import SourceImageRecord

logger = logging.getLogger(__name__)


class InMemoryRecordStore:
    """
    Record collaborator keeping image records in memory. Ids are 32
    character hex strings.
    """

    def __init__(self):
        self._records: Dict[str, SourceImageRecord] = {}
        self._lock = threading.Lock()

    def create_image_record(
        self,
        file_name: str,
        file_type: str,
        image_name: str,
        image_type_id: str,
        path: Optional[str] = None,
        original_id: Optional[str] = None,
    ) -> SourceImageRecord:
        record = SourceImageRecord(
            id=uuid.uuid4().hex,
            file_name=file_name,
            file_type=file_type,
            image_name=image_name,
            image_type_id=image_type_id,
            path=path,
            original_id=original_id,
        )
        with self._lock:
            self._records[record.id] = record
        logger.debug(f"Created image record {record.id} for {file_name}")
        return record

    def get(self, record_id: str) -> Optional[SourceImageRecord]:
        return self._records.get(record_id)

    def delete_image_record(self, record_id: str) -> None:
        with self._lock:
            self._records.pop(record_id, None)
        logger.debug(f"Deleted image record {record_id}")

    def __len__(self) -> int:
        return len(self._records)
