"""
API v1 routes.

Defines REST endpoints for the UniVote API:
- /v1/registrations/...   registration workflow steps
- /v1/elections/...       election details, voting and live results
"""

from fastapi import APIRouter, Depends, HTTPException, Response, status

from src.api.dependencies import (
    get_current_voter,
    get_election_catalog,
    get_registration_workflow,
    get_results_aggregator,
    get_session_store,
    get_vote_caster,
)
from src.api.models import (
    CandidateResponse,
    CandidateResultResponse,
    CastVoteRequest,
    ElectionDetailResponse,
    ElectionResponse,
    ErrorResponse,
    FieldErrorResponse,
    RegistrationInfoRequest,
    ResultsResponse,
    SessionResponse,
    VerifyCodeRequest,
    VoteReceiptResponse,
    VotingStatusResponse,
)
from src.domain.elections import ElectionCatalog, election_status
from src.domain.exceptions import (
    ElectionNotFound,
    IdentityConflict,
    InvalidTransition,
    RegistrationFailed,
    ValidationFailed,
    VerificationFailed,
    VoteRejected,
    WalletDeclined,
)
from src.domain.models import Election, Identity, RegistrationForm, RegistrationSession
from src.domain.ports import RejectionReason, SessionStore
from src.domain.registration import RegistrationWorkflow
from src.domain.results import ResultsAggregator
from src.domain.voting import VoteCaster, utc_now

router = APIRouter(tags=["v1"])

CONFLICT_MESSAGES = {
    "email": "This email is already registered",
    "external_id": "This member ID is already registered",
}

REJECTIONS: dict[RejectionReason, tuple[int, str]] = {
    RejectionReason.NOT_VERIFIED: (
        status.HTTP_403_FORBIDDEN,
        "Only verified members can vote",
    ),
    RejectionReason.ELECTION_NOT_ACTIVE: (
        status.HTTP_403_FORBIDDEN,
        "This election is not open for voting",
    ),
    RejectionReason.CANDIDATE_NOT_FOUND: (
        status.HTTP_404_NOT_FOUND,
        "Candidate not found in this election",
    ),
    RejectionReason.ALREADY_VOTED: (
        status.HTTP_409_CONFLICT,
        "You have already voted in this election",
    ),
    RejectionReason.WALLET_DECLINED: (
        status.HTTP_400_BAD_REQUEST,
        "Please connect your wallet to vote",
    ),
}


def _session_response(session_id: str, session: RegistrationSession) -> SessionResponse:
    return SessionResponse(
        session_id=session_id,
        stage=session.stage,
        code_delivered=session.code_delivered,
        identity_id=session.identity_id,
        wallet_address=session.wallet_address,
    )


def _load_session(sessions: SessionStore, session_id: str) -> RegistrationSession:
    session = sessions.get(session_id)
    if session is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Registration session not found",
        )
    return session


def _conflict(exc: IdentityConflict) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_409_CONFLICT,
        detail={
            "message": "Registration failed",
            "fields": {field: CONFLICT_MESSAGES.get(field, "Already registered") for field in exc.fields},
        },
    )


def _invalid_transition(exc: InvalidTransition) -> HTTPException:
    return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))


def _election_response(election: Election) -> dict:
    return {
        "id": election.id,
        "title": election.title,
        "description": election.description,
        "start_time": election.start_time,
        "end_time": election.end_time,
        "status": election_status(election, utc_now()),
    }


def _election_not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Election not found")


# Registration workflow


@router.post(
    "/registrations",
    response_model=SessionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Begin a registration",
)
def start_registration(
    sessions: SessionStore = Depends(get_session_store),
    workflow: RegistrationWorkflow = Depends(get_registration_workflow),
) -> SessionResponse:
    session = workflow.start()
    session_id = sessions.create(session)
    return _session_response(session_id, session)


@router.get(
    "/registrations/{session_id}",
    response_model=SessionResponse,
    responses={404: {"model": ErrorResponse, "description": "Unknown session"}},
    summary="Get registration progress",
)
def get_registration(
    session_id: str,
    sessions: SessionStore = Depends(get_session_store),
) -> SessionResponse:
    return _session_response(session_id, _load_session(sessions, session_id))


@router.post(
    "/registrations/{session_id}/info",
    response_model=SessionResponse,
    responses={
        404: {"model": ErrorResponse, "description": "Unknown session"},
        409: {"model": FieldErrorResponse, "description": "Email or member ID already registered"},
        422: {"model": FieldErrorResponse, "description": "Invalid fields"},
    },
    summary="Submit personal information",
    description="Validates every field, checks email and member ID are unused, "
    "then emails a 6-digit verification code. code_delivered=false means the "
    "code was issued but the email could not be sent.",
)
def submit_registration_info(
    session_id: str,
    request_data: RegistrationInfoRequest,
    sessions: SessionStore = Depends(get_session_store),
    workflow: RegistrationWorkflow = Depends(get_registration_workflow),
) -> SessionResponse:
    session = _load_session(sessions, session_id)
    form = RegistrationForm(**request_data.model_dump())
    try:
        session = workflow.submit_info(session, form)
    except ValidationFailed as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={"message": "Please correct the highlighted fields", "fields": exc.errors},
        ) from None
    except IdentityConflict as exc:
        raise _conflict(exc) from None
    except InvalidTransition as exc:
        raise _invalid_transition(exc) from None
    sessions.save(session_id, session)
    return _session_response(session_id, session)


@router.post(
    "/registrations/{session_id}/code/resend",
    response_model=SessionResponse,
    summary="Resend the verification code",
)
def resend_registration_code(
    session_id: str,
    sessions: SessionStore = Depends(get_session_store),
    workflow: RegistrationWorkflow = Depends(get_registration_workflow),
) -> SessionResponse:
    session = _load_session(sessions, session_id)
    try:
        session = workflow.resend_code(session)
    except InvalidTransition as exc:
        raise _invalid_transition(exc) from None
    sessions.save(session_id, session)
    return _session_response(session_id, session)


@router.post(
    "/registrations/{session_id}/verify",
    response_model=SessionResponse,
    responses={400: {"model": ErrorResponse, "description": "Invalid verification code"}},
    summary="Verify email with the emailed code",
)
def verify_registration_code(
    session_id: str,
    request_data: VerifyCodeRequest,
    sessions: SessionStore = Depends(get_session_store),
    workflow: RegistrationWorkflow = Depends(get_registration_workflow),
) -> SessionResponse:
    session = _load_session(sessions, session_id)
    try:
        session = workflow.verify_code(session, request_data.code)
    except VerificationFailed:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid verification code. Please try again.",
        ) from None
    except InvalidTransition as exc:
        raise _invalid_transition(exc) from None
    sessions.save(session_id, session)
    return _session_response(session_id, session)


@router.post(
    "/registrations/{session_id}/wallet",
    response_model=SessionResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Wallet connection declined"},
        409: {"model": FieldErrorResponse, "description": "Email or member ID already registered"},
        503: {"model": ErrorResponse, "description": "Account could not be created"},
    },
    summary="Connect wallet and complete registration",
    description="Send the wallet address approved in the browser as the "
    "X-Wallet-Address header. A missing header means the user declined.",
)
def complete_registration(
    session_id: str,
    sessions: SessionStore = Depends(get_session_store),
    workflow: RegistrationWorkflow = Depends(get_registration_workflow),
) -> SessionResponse:
    session = _load_session(sessions, session_id)
    try:
        session = workflow.complete(session)
    except WalletDeclined:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Wallet connection was declined. Please try again.",
        ) from None
    except RegistrationFailed:
        # Generic on purpose: which step failed is not exposed.
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Failed to create account. Please try again.",
        ) from None
    except IdentityConflict as exc:
        raise _conflict(exc) from None
    except InvalidTransition as exc:
        raise _invalid_transition(exc) from None
    sessions.save(session_id, session)
    return _session_response(session_id, session)


@router.post(
    "/registrations/{session_id}/back",
    response_model=SessionResponse,
    summary="Go back one registration step",
)
def registration_step_back(
    session_id: str,
    sessions: SessionStore = Depends(get_session_store),
    workflow: RegistrationWorkflow = Depends(get_registration_workflow),
) -> SessionResponse:
    session = _load_session(sessions, session_id)
    try:
        session = workflow.go_back(session)
    except InvalidTransition as exc:
        raise _invalid_transition(exc) from None
    sessions.save(session_id, session)
    return _session_response(session_id, session)


@router.delete(
    "/registrations/{session_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={404: {"model": ErrorResponse, "description": "Unknown session"}},
    summary="Abandon a registration",
    description="Destroys the session and its pending form. Nothing has been "
    "persisted before the wallet step completes, so nothing else is undone.",
)
def abandon_registration(
    session_id: str,
    sessions: SessionStore = Depends(get_session_store),
) -> Response:
    _load_session(sessions, session_id)
    sessions.discard(session_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# Elections and voting


@router.get(
    "/elections",
    response_model=list[ElectionResponse],
    summary="List elections",
)
def list_elections(
    catalog: ElectionCatalog = Depends(get_election_catalog),
) -> list[dict]:
    return [_election_response(election) for election in catalog.list_elections()]


@router.get(
    "/elections/{election_id}",
    response_model=ElectionDetailResponse,
    responses={404: {"model": ErrorResponse, "description": "Election not found"}},
    summary="Get election details and candidates",
)
def get_election(
    election_id: str,
    catalog: ElectionCatalog = Depends(get_election_catalog),
) -> dict:
    try:
        election = catalog.get_election(election_id)
        candidates = catalog.list_candidates(election_id)
    except ElectionNotFound:
        raise _election_not_found() from None
    return {
        **_election_response(election),
        "candidates": [
            CandidateResponse(
                id=c.id,
                full_name=c.full_name,
                department=c.department,
                course=c.course,
                year_of_study=c.year_of_study,
                manifesto=c.manifesto,
                image_url=c.image_url,
                video_url=c.video_url,
            )
            for c in candidates
        ],
    }


@router.get(
    "/elections/{election_id}/results",
    response_model=ResultsResponse,
    responses={404: {"model": ErrorResponse, "description": "Election not found"}},
    summary="Get live election results",
)
def get_election_results(
    election_id: str,
    aggregator: ResultsAggregator = Depends(get_results_aggregator),
) -> ResultsResponse:
    try:
        results = aggregator.tally(election_id)
    except ElectionNotFound:
        raise _election_not_found() from None
    return ResultsResponse(
        election_id=results.election_id,
        total_votes=results.total_votes,
        results=[
            CandidateResultResponse(
                candidate_id=t.candidate_id,
                full_name=t.full_name,
                vote_count=t.vote_count,
                percentage=round(t.percentage, 1),
            )
            for t in results.tallies
        ],
    )


@router.get(
    "/elections/{election_id}/vote",
    response_model=VotingStatusResponse,
    responses={401: {"model": ErrorResponse, "description": "Invalid credentials"}},
    summary="Check whether the authenticated voter has voted",
)
def get_voting_status(
    election_id: str,
    voter: Identity = Depends(get_current_voter),
    caster: VoteCaster = Depends(get_vote_caster),
) -> VotingStatusResponse:
    return VotingStatusResponse(
        election_id=election_id, has_voted=caster.has_voted(voter.id, election_id)
    )


@router.post(
    "/elections/{election_id}/votes",
    response_model=VoteReceiptResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse, "description": "Wallet connection declined"},
        401: {"model": ErrorResponse, "description": "Invalid credentials"},
        403: {"model": ErrorResponse, "description": "Voter not eligible or election not active"},
        404: {"model": ErrorResponse, "description": "Election or candidate not found"},
        409: {"model": ErrorResponse, "description": "Already voted"},
    },
    summary="Cast a vote",
    description="Voter credentials via HTTP BASIC AUTH. A voter without a bound "
    "wallet must send the approved address as the X-Wallet-Address header.",
)
def cast_vote(
    election_id: str,
    request_data: CastVoteRequest,
    voter: Identity = Depends(get_current_voter),
    caster: VoteCaster = Depends(get_vote_caster),
) -> VoteReceiptResponse:
    try:
        receipt = caster.cast(voter.id, request_data.candidate_id, election_id)
    except ElectionNotFound:
        raise _election_not_found() from None
    except VoteRejected as exc:
        status_code, detail = REJECTIONS[exc.reason]
        raise HTTPException(status_code=status_code, detail=detail) from None
    return VoteReceiptResponse(
        message="Vote recorded",
        vote_id=receipt.vote_id,
        vote_hash=receipt.vote_hash,
    )
