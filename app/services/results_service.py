"""
Live results.

``ResultsTally`` keeps running vote counts per (position, candidate). It is
loaded once with a single GROUP BY query and afterwards updated with the
deltas of each recorded ballot, so reads do not rescan the votes table.
Deltas reported while a rebuild query runs are replayed onto the new
snapshot once it lands.
The tally lives on ``app.state`` and is only correct for a single process;
call ``rebuild`` to resynchronise after votes are written elsewhere.
"""
from __future__ import annotations

import asyncio
import logging
from collections import defaultdict
from datetime import datetime, timezone

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import AlreadyVoted, Forbidden, ValidationError
from app.models.voter import VoterProfile
from app.models.voting import Candidate, Vote, VoteType, VotingPosition
from app.schemas.results import BallotSelection, CandidateResult, PositionResult, ResultsOut
from app.services.voter_service import new_issuance_token

logger = logging.getLogger(__name__)


class ResultsTally:
    def __init__(self) -> None:
        self._counts: dict[str, dict[str, int]] = defaultdict(lambda: defaultdict(int))
        self._loaded = False
        # deltas that arrive while a rebuild query is in flight
        self._pending: list[tuple[str, str, int]] | None = None
        self._lock = asyncio.Lock()

    @property
    def loaded(self) -> bool:
        return self._loaded

    @property
    def lock(self) -> asyncio.Lock:
        """Held by rebuilds and by ballot commits, so a snapshot never straddles a commit."""
        return self._lock

    async def rebuild(self, db: AsyncSession) -> None:
        async with self._lock:
            self._pending = []
            try:
                res = await db.execute(
                    select(Vote.voting_position_id, Vote.candidate_id, func.count(Vote.id))
                    .group_by(Vote.voting_position_id, Vote.candidate_id)
                )
                counts: dict[str, dict[str, int]] = defaultdict(lambda: defaultdict(int))
                for position_id, candidate_id, n in res.all():
                    counts[position_id][candidate_id] = int(n)
            except BaseException:
                pending, self._pending = self._pending, None
                for position_id, candidate_id, delta in pending:
                    self.apply_vote(position_id, candidate_id, delta)
                raise

            pending, self._pending = self._pending, None
            for position_id, candidate_id, delta in pending:
                counts[position_id][candidate_id] += delta
            self._counts = counts
            self._loaded = True

    async def ensure_loaded(self, db: AsyncSession) -> None:
        if not self._loaded:
            await self.rebuild(db)

    def apply_vote(self, position_id: str, candidate_id: str, delta: int = 1) -> None:
        if self._pending is not None:
            self._pending.append((position_id, candidate_id, delta))
            return
        if not self._loaded:
            return  # picked up by the first rebuild
        self._counts[position_id][candidate_id] += delta

    def count(self, position_id: str, candidate_id: str) -> int:
        return self._counts.get(position_id, {}).get(candidate_id, 0)

    def snapshot(self) -> dict[str, dict[str, int]]:
        return {pid: dict(c) for pid, c in self._counts.items()}


async def turnout(db: AsyncSession) -> tuple[int, int, float]:
    """Verified voters, how many of them voted, and the percentage (one decimal)."""
    res = await db.execute(
        select(
            func.count(VoterProfile.id),
            func.count(VoterProfile.id).filter(VoterProfile.voted.is_(True)),
        ).where(VoterProfile.verified.is_(True))
    )
    total, voted = res.one()
    total, voted = int(total or 0), int(voted or 0)
    return total, voted, round(voted / total * 100, 1) if total else 0.0


async def build_results(db: AsyncSession, tally: ResultsTally) -> ResultsOut:
    await tally.ensure_loaded(db)

    pos_res = await db.execute(
        select(VotingPosition)
        .where(VotingPosition.is_active.is_(True))
        .order_by(VotingPosition.display_order.asc(), VotingPosition.position_name.asc())
    )
    positions = list(pos_res.scalars().all())

    cand_res = await db.execute(select(Candidate).order_by(Candidate.name.asc()))
    by_position: dict[str, list[Candidate]] = defaultdict(list)
    for c in cand_res.scalars().all():
        by_position[c.voting_position_id].append(c)

    out = []
    for p in positions:
        candidates = [
            CandidateResult(
                candidate_id=c.id,
                name=c.name,
                department=c.department,
                photo_url=c.photo_url,
                votes=tally.count(p.id, c.id),
            )
            for c in by_position.get(p.id, [])
        ]
        candidates.sort(key=lambda r: r.votes, reverse=True)
        out.append(PositionResult(
            position_id=p.id,
            position_name=p.position_name,
            vote_type=p.vote_type,
            total_votes=sum(r.votes for r in candidates),
            candidates=candidates,
        ))

    total, voted, pct = await turnout(db)
    return ResultsOut(positions=out, total_voters=total, voted_count=voted, turnout=pct)


async def _validate_selections(db: AsyncSession, selections: list[BallotSelection]) -> list[tuple[str, str]]:
    seen_positions: set[str] = set()
    lines: list[tuple[str, str]] = []

    for sel in selections:
        if sel.voting_position_id in seen_positions:
            raise ValidationError("Each position may appear only once on a ballot")
        seen_positions.add(sel.voting_position_id)

        res = await db.execute(select(VotingPosition).where(VotingPosition.id == sel.voting_position_id))
        position = res.scalar_one_or_none()
        if position is None or not position.is_active:
            raise ValidationError("Unknown or inactive voting position")

        picks = list(dict.fromkeys(sel.candidate_ids))
        if not picks:
            raise ValidationError(f"Select at least one candidate for {position.position_name}")
        limit = 1 if position.vote_type == VoteType.SINGLE.value else position.max_selections
        if len(picks) > limit:
            raise ValidationError(f"At most {limit} selection(s) allowed for {position.position_name}")

        res = await db.execute(
            select(Candidate.id)
            .where(Candidate.voting_position_id == position.id)
            .where(Candidate.id.in_(picks))
        )
        valid = set(res.scalars().all())
        if valid != set(picks):
            raise ValidationError(f"Invalid candidate selection for {position.position_name}")

        lines.extend((position.id, cid) for cid in picks)

    return lines


async def cast_ballot(
    db: AsyncSession,
    voter: VoterProfile,
    selections: list[BallotSelection],
    tally: ResultsTally,
) -> int:
    if not voter.verified:
        raise Forbidden("Your registration is pending verification")

    lines = await _validate_selections(db, selections)

    token = voter.issuance_token or new_issuance_token()

    # atomic claim of the voter's single ballot
    claimed = await db.execute(
        update(VoterProfile)
        .where(VoterProfile.id == voter.id)
        .where(VoterProfile.voted.is_(False))
        .values(voted=True, voted_at=datetime.now(timezone.utc), issuance_token=token)
        .returning(VoterProfile.id)
        .execution_options(synchronize_session=False)
    )
    if claimed.scalar_one_or_none() is None:
        raise AlreadyVoted("Already voted")

    for position_id, candidate_id in lines:
        db.add(Vote(issuance_token=token, voting_position_id=position_id, candidate_id=candidate_id))

    async with tally.lock:
        await db.commit()
        for position_id, candidate_id in lines:
            tally.apply_vote(position_id, candidate_id)

    logger.info("Ballot recorded with %d line(s)", len(lines))
    return len(lines)
