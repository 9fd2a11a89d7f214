from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from modules.zine.models.zine_request import ZineRequest


class ZineRepository:
    def __init__(self, db_session: Session):
        self.db = db_session

    def save(self, zine_request: ZineRequest) -> ZineRequest:
        self.db.add(zine_request)
        self.db.commit()
        self.db.refresh(zine_request)
        return zine_request

    def find_all(self) -> List[ZineRequest]:
        return self.db.query(ZineRequest).order_by(ZineRequest.created_at.desc()).all()

    def update(self, request_id: int, data: Dict) -> Optional[ZineRequest]:
        zine_request = self.db.get(ZineRequest, request_id)
        if not zine_request:
            return None
        for field, value in data.items():
            setattr(zine_request, field, value)
        self.db.commit()
        self.db.refresh(zine_request)
        return zine_request
