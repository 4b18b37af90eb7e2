# app/models/base.py
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """플래너 테이블 모델들이 공유하는 선언적 기본 클래스.

    SQLAlchemy 2.0의 `DeclarativeBase`를 상속받아 플래너, 일자, 이벤트 모델이
    동일한 메타데이터 레지스트리를 공유하도록 합니다. 테이블 생성은
    `app.database.init_db`가 이 메타데이터로 수행합니다.
    """

    pass
