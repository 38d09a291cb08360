"""In-memory repository backing the reference application and tests."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from uuid import uuid4


@dataclass(slots=True)
class ItemRecord:
    id: str
    name: str
    quantity: int
    created_at: datetime
    attachments: list[str] = field(default_factory=list)


@dataclass(slots=True)
class InMemoryStore:
    items: dict[str, ItemRecord] = field(default_factory=dict)

    def create_item(self, name: str, quantity: int) -> ItemRecord:
        item = ItemRecord(id=str(uuid4()), name=name, quantity=quantity, created_at=datetime.now(UTC))
        self.items[item.id] = item
        return item

    def get_item(self, item_id: str) -> ItemRecord | None:
        return self.items.get(item_id)

    def list_items(self, limit: int) -> list[ItemRecord]:
        items = sorted(self.items.values(), key=lambda record: record.created_at)
        return items[:limit]

    def add_attachment(self, item: ItemRecord, filename: str) -> None:
        item.attachments.append(filename)

    def delete_item(self, item_id: str) -> None:
        self.items.pop(item_id, None)
