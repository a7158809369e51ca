from typing import Optional
import logging
import re

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from synergy_crm.database import get_session

logger = logging.getLogger(__name__)

CODE_WIDTH = 3


class EntityCodeGenerator:
    """
    Derives the next human-readable code for an entity table (C001, V012, SO104...).

    The most recently created row decides the next number. An empty table,
    a failed read or a code that does not look like ``<prefix><digits>``
    all restart the sequence at ``<prefix>001``.
    """

    def __init__(self, model, code_field: str, prefix: str, width: int = CODE_WIDTH, session_factory=None):
        self.model = model
        self.code_field = code_field
        self.prefix = prefix
        self.width = width
        self._pattern = re.compile(rf"^{re.escape(prefix)}([0-9]+)$")
        self._session_factory = session_factory or get_session

    @property
    def first_code(self) -> str:
        return self.format(1)

    def format(self, number: int) -> str:
        # Pads to at least `width` digits, never truncates
        return f"{self.prefix}{number:0{self.width}d}"

    def next_after(self, last_code: Optional[str]) -> str:
        if not last_code:
            return self.first_code
        match = self._pattern.match(last_code)
        if not match:
            return self.first_code
        return self.format(int(match.group(1)) + 1)

    async def generate(self, user_id: Optional[str] = None) -> str:
        code_column = getattr(self.model, self.code_field)
        try:
            async with self._session_factory(user_id) as session:
                result = await session.execute(
                    select(code_column).order_by(self.model.created_at.desc()).limit(1)
                )
                last_code = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error(f"Error fetching last {self.code_field}: {str(e)}")
            return self.first_code

        return self.next_after(last_code)
