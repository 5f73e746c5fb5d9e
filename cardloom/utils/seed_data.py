# cardloom/utils/seed_data.py
"""
초기 데이터 시딩 유틸리티
- 앱 시작 시(SEED_DATA=true) 실행되어 JSON 기반 데모 카탈로그(세트/카드)를 DB에 넣음
- 이미 있는 세트(code)와 카드(세트 + 번호)는 건너뜀
"""
import json
import logging
from datetime import date
from decimal import Decimal
from pathlib import Path
from typing import Dict

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from cardloom.models.card import Card, CardSet

logger = logging.getLogger(__name__)

SEED_FILE = Path(__file__).parent / "seed_cards.json"


def load_catalog_from_json(path: Path = SEED_FILE) -> Dict[str, list]:
    """항상 최신 JSON 파일에서 세트/카드 목록을 로드합니다."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        return {"sets": data.get("sets", []), "cards": data.get("cards", [])}
    except (OSError, ValueError) as e:
        logger.error(f"JSON 파일 로드 중 오류: {e}")
        return {"sets": [], "cards": []}


async def seed_catalog(db: AsyncSession, path: Path = SEED_FILE) -> None:
    catalog = load_catalog_from_json(path)
    if not catalog["sets"]:
        logger.warning("로드할 카탈로그 데이터가 없습니다.")
        return

    try:
        result = await db.execute(select(CardSet))
        sets_by_code = {s.code: s for s in result.scalars().all()}

        created_sets = 0
        for set_data in catalog["sets"]:
            if set_data["code"] in sets_by_code:
                continue
            card_set = CardSet(**{**set_data, "release_date": date.fromisoformat(set_data["release_date"])})
            db.add(card_set)
            sets_by_code[card_set.code] = card_set
            created_sets += 1
        await db.flush()

        result = await db.execute(select(Card.set_id, Card.number))
        existing_cards = {(row[0], row[1]) for row in result.all()}

        created_cards = 0
        for card_data in catalog["cards"]:
            card_set = sets_by_code.get(card_data["set_code"])
            if card_set is None:
                logger.warning(f"세트를 찾을 수 없어 카드 건너뜀: {card_data['name']} ({card_data['set_code']})")
                continue
            if (card_set.set_id, card_data["number"]) in existing_cards:
                continue

            fields = {k: v for k, v in card_data.items() if k != "set_code"}
            if fields.get("market_price") is not None:
                fields["market_price"] = Decimal(str(fields["market_price"]))
            db.add(Card(game=card_set.game, set_id=card_set.set_id, **fields))
            created_cards += 1

        await db.commit()

        if created_sets or created_cards:
            logger.info(f"카탈로그 시딩 완료: 세트 {created_sets}개, 카드 {created_cards}개 추가")

    except Exception as e:
        logger.error(f"카탈로그 시딩 중 오류: {e}")
        await db.rollback()
        raise


async def init_seed_data(db: AsyncSession) -> None:
    """앱 시작 시 자동으로 호출되어 전체 초기 데이터 시딩 수행"""
    try:
        await seed_catalog(db)
    except Exception as e:
        logger.error(f"초기 데이터 시딩 실패: {e}")
        raise
