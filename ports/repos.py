from __future__ import annotations

from typing import Any, Dict, List, Optional, Protocol


class ConnectionsRepoPort(Protocol):
    def insert(
        self,
        created_by_email: str,
        email: str,
        name: Optional[str],
        linkedin_url: Optional[str],
    ) -> Dict[str, Any]:
        ...

    def get_for_owner(self, connection_id: str, created_by_email: str) -> Optional[Dict[str, Any]]:
        ...

    def find_id_by_email(
        self,
        created_by_email: str,
        email: str,
        exclude_id: Optional[str] = None,
    ) -> Optional[str]:
        ...

    def update(
        self,
        connection_id: str,
        created_by_email: str,
        fields: Dict[str, Optional[str]],
    ) -> Optional[Dict[str, Any]]:
        ...

    def delete(self, connection_id: str, created_by_email: str) -> bool:
        ...

    def list_for_owner(
        self,
        created_by_email: str,
        search: Optional[str] = None,
        limit: int = 50,
        cursor_created_at: Optional[str] = None,
        cursor_id: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        ...

    def count_for_owner(self, created_by_email: str, since: Optional[str] = None) -> int:
        ...
