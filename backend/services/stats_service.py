"""
Stats service — aggregate counts and totals over stored transactions.

Pure read. The counts are separate queries, so a poll that lands between
them can make the numbers disagree by one; that is acceptable here.
"""
from sqlalchemy.ext.asyncio import AsyncSession

from services import transaction_store


def format_success_rate(confirmed: int, total: int) -> str:
    """confirmed/total as a percentage with 2 decimals, e.g. "66.67%"; "0%" when empty."""
    if total <= 0:
        return "0%"
    return f"{confirmed / total * 100:.2f}%"


async def compute_stats(db: AsyncSession) -> dict:
    counts = await transaction_store.count_by_status(db)
    total = sum(counts.values())
    total_sent = await transaction_store.sum_confirmed_amount(db)

    return {
        "total": total,
        "confirmed": counts["confirmed"],
        "pending": counts["pending"],
        "failed": counts["failed"],
        "totalSent": total_sent,
        "totalAlgoSent": total_sent,
        "successRate": format_success_rate(counts["confirmed"], total),
    }
