"""委任解決 ドメインサービス."""

from ballotbox.common.logging import get_logger
from ballotbox.domain.exceptions import (
    DelegateNotRegistered,
    InvalidCandidateId,
    SelfDelegation,
)
from ballotbox.domain.services.tally_service import TallyService
from ballotbox.domain.services.voter_registry import VoterRegistry
from ballotbox.domain.value_objects.election_event import ElectionEvent


logger = get_logger(__name__)


class DelegationResolver:
    """委任の時点で、委任票を即時加算するか保留として記録するかを決める.

    委任は1段階のみ。委任先が既に直接投票している場合は、その候補者に
    委任元の1票を即時加算する。委任先がまだ投票していない場合は
    委任関係を記録するだけで、委任先が後で投票しても委任票は加算されない。
    また、委任による得票は直接投票の総数（total_votes）に含めない。
    """

    def __init__(
        self, voter_registry: VoterRegistry, tally_service: TallyService
    ) -> None:
        self.voter_registry = voter_registry
        self.tally_service = tally_service

    async def delegate_vote(
        self, from_voter_id: str, to_voter_id: str
    ) -> ElectionEvent:
        """投票を委任する.

        Args:
            from_voter_id: 委任元の有権者ID
            to_voter_id: 委任先の有権者ID

        Returns:
            即時加算時はVOTE_CAST（delegated=True）、保留時はVOTE_DELEGATED

        Raises:
            NotRegistered: 委任元が未登録の場合
            AlreadyVoted: 委任元が投票済みの場合
            DelegateNotRegistered: 委任先が未登録の場合
            SelfDelegation: 自分自身に委任しようとした場合
            InvalidCandidateId: 委任先の投票自体が委任だった場合
        """
        delegator = await self.voter_registry.get_eligible_voter(from_voter_id)
        delegate = await self.voter_registry.get_voter(to_voter_id)
        if not delegate.is_registered:
            raise DelegateNotRegistered(to_voter_id)
        if from_voter_id == to_voter_id:
            raise SelfDelegation(from_voter_id)

        if delegate.has_voted:
            candidate_id = delegate.voted_candidate_id
            if candidate_id is None:
                # 委任先自身が委任済み: 多段委任は解決しない
                raise InvalidCandidateId(candidate_id)
            await self.tally_service.validate_candidate_id(candidate_id)

            delegator.spend_ballot_by_delegation()
            await self.tally_service.credit_vote(candidate_id)
            await self.voter_registry.save(delegator)
            return ElectionEvent.vote_cast(from_voter_id, candidate_id, delegated=True)

        if delegate.has_pending_delegation:
            logger.info(
                "Overwriting pending delegation",
                to_voter_id=to_voter_id,
                previous_from_voter_id=delegate.delegate_of,
                from_voter_id=from_voter_id,
            )
        delegator.spend_ballot_by_delegation()
        delegate.receive_delegation(from_voter_id)
        await self.voter_registry.save(delegator)
        await self.voter_registry.save(delegate)
        return ElectionEvent.vote_delegated(from_voter_id, to_voter_id)
