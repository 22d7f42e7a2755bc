import random
import string
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from portal.models.course import Course

ACCESS_CODE_BATCH = 5
ACCESS_CODE_ROUNDS = 10

def random_access_code() -> str:
    """Three letters then three digits, e.g. CSE101."""
    letters = ''.join(random.choices(string.ascii_uppercase, k=3))
    digits = ''.join(random.choices(string.digits, k=3))
    return letters + digits

async def generate_unique_access_code(db: AsyncSession) -> str:
    """Pick an access code no course uses yet.

    Each round checks a batch of candidates in a single query. Gives up with
    ``RuntimeError`` after ``ACCESS_CODE_ROUNDS`` rounds without a free code.
    """
    for _ in range(ACCESS_CODE_ROUNDS):
        candidates = {random_access_code() for _ in range(ACCESS_CODE_BATCH)}
        result = await db.execute(select(Course.access_code).where(Course.access_code.in_(candidates)))
        free = candidates - set(result.scalars().all())
        if free:
            return sorted(free)[0]
    raise RuntimeError("Could not allocate a unique course access code")
