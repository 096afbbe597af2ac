import logging
import threading
import uuid
from collections import OrderedDict
from functools import lru_cache
from time import perf_counter
from typing import List

from fastapi import Depends, FastAPI, HTTPException
from fastapi.responses import Response
from prometheus_client import Histogram, Counter, generate_latest, CONTENT_TYPE_LATEST

# Local imports
from .compliance_docs import COMPLIANCE_DOCUMENTS
from .edge_cases import EdgeCaseRunner
from .errors import BackendError, ConfigurationBlockedError
from .governance import ComplianceGate
from .imaging import generate_image
from .orchestrator import ConversationOrchestrator
from .registry import MODULE_CATALOGUE
from .schemas import (
    ChatRequest, ChatResult, ComplianceDocuments, ComplianceReport, EdgeCaseRunResponse, ErrorResponse,
    FeatureFlags, ImageRequest, ImageResponse, ModuleInfo, SessionCreateRequest, SessionMessageRequest,
    SessionModuleRequest, SessionState,
)
from .session import ChatSession
from .settings import settings as app_settings

logging.basicConfig(
    level=app_settings.log_level.upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Prometheus metrics
LAT_CHAT  = Histogram("latency_chat_ms", "Chat latency (ms)")
LAT_IMAGE = Histogram("latency_image_ms", "Image generation latency (ms)")
REQS      = Counter("requests_total", "Total requests", ["route"])
BLOCKS    = Counter("security_blocks_total", "Requests refused by the compliance gate")

# insertion-ordered; oldest first
SESSIONS: "OrderedDict[str, ChatSession]" = OrderedDict()
_SESSIONS_LOCK = threading.Lock()


@lru_cache
def get_orchestrator() -> ConversationOrchestrator:
    return ConversationOrchestrator()


def _blocked(e: ConfigurationBlockedError) -> HTTPException:
    BLOCKS.inc()
    return HTTPException(status_code=403, detail=f"governance_blocked: {str(e)}")


def _get_session(session_id: str) -> ChatSession:
    with _SESSIONS_LOCK:
        session = SESSIONS.get(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail=f"unknown session: {session_id}")
    return session


def _store_session(session_id: str, session: ChatSession) -> None:
    with _SESSIONS_LOCK:
        SESSIONS[session_id] = session
        while len(SESSIONS) > max(app_settings.max_sessions, 1):
            evicted, _ = SESSIONS.popitem(last=False)
            logger.info("Evicted session %s (store full)", evicted)


def _session_state(session_id: str, session: ChatSession) -> SessionState:
    return SessionState(id=session_id, module=session.module, error_state=session.error_state, history=session.history)


# FastAPI app
app = FastAPI(title=app_settings.app_title)

# /health and /metrics are liveness and scrape endpoints; not counted in REQS

@app.get("/health")
def health():
    return {"ok": True}

@app.get("/metrics")
def metrics():
    return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)


@app.get("/modules", response_model=List[ModuleInfo])
def modules():
    REQS.labels("/modules").inc()
    return list(MODULE_CATALOGUE)

@app.get("/flags", response_model=FeatureFlags)
def flags(orch: ConversationOrchestrator = Depends(get_orchestrator)):
    REQS.labels("/flags").inc()
    return orch.flags

@app.get("/compliance/report", response_model=ComplianceReport)
def compliance_report(orch: ConversationOrchestrator = Depends(get_orchestrator)):
    REQS.labels("/compliance/report").inc()
    return ComplianceGate(orch.flags).validate(orch.registry.canonical_config)

@app.get("/compliance/documents", response_model=ComplianceDocuments)
def compliance_documents():
    REQS.labels("/compliance/documents").inc()
    return ComplianceDocuments(documents=COMPLIANCE_DOCUMENTS)


@app.post(
    "/chat",
    response_model=ChatResult,
    response_model_exclude_none=True,
    responses={403: {"model": ErrorResponse}, 502: {"model": ErrorResponse}},
)
def chat(req: ChatRequest, orch: ConversationOrchestrator = Depends(get_orchestrator)):
    REQS.labels("/chat").inc()

    t0 = perf_counter()
    try:
        out = orch.send_message(req.message, req.history, req.module, req.location)
    except ConfigurationBlockedError as e:
        raise _blocked(e)
    except Exception as e:
        logger.exception("Chat backend call failed")
        raise HTTPException(status_code=502, detail=f"llm_error: {str(e)}")
    LAT_CHAT.observe((perf_counter() - t0) * 1000)
    return out


@app.post("/image", response_model=ImageResponse, responses={502: {"model": ErrorResponse}})
def image(req: ImageRequest, orch: ConversationOrchestrator = Depends(get_orchestrator)):
    REQS.labels("/image").inc()

    t0 = perf_counter()
    try:
        url = generate_image(orch.backend, req.prompt, req.module)
    except BackendError as e:
        raise HTTPException(status_code=502, detail=f"image_error: {str(e)}")
    LAT_IMAGE.observe((perf_counter() - t0) * 1000)
    return ImageResponse(url=url, prompt=req.prompt)


# Stateful chat sessions (in-memory, bounded by settings.max_sessions)

@app.post("/sessions", response_model=SessionState, response_model_exclude_none=True)
def create_session(req: SessionCreateRequest, orch: ConversationOrchestrator = Depends(get_orchestrator)):
    REQS.labels("/sessions").inc()
    session_id = uuid.uuid4().hex
    session = ChatSession(orch, module=req.module, location=req.location)
    _store_session(session_id, session)
    return _session_state(session_id, session)

@app.get("/sessions/{session_id}", response_model=SessionState, response_model_exclude_none=True)
def get_session(session_id: str):
    REQS.labels("/sessions/{id}").inc()
    return _session_state(session_id, _get_session(session_id))

@app.delete("/sessions/{session_id}", status_code=204)
def delete_session(session_id: str):
    REQS.labels("/sessions/{id}:delete").inc()
    with _SESSIONS_LOCK:
        session = SESSIONS.pop(session_id, None)
    if session is None:
        raise HTTPException(status_code=404, detail=f"unknown session: {session_id}")
    return Response(status_code=204)

@app.post("/sessions/{session_id}/messages", response_model=SessionState, response_model_exclude_none=True,
          responses={403: {"model": ErrorResponse}})
def send_session_message(session_id: str, req: SessionMessageRequest):
    REQS.labels("/sessions/{id}/messages").inc()
    session = _get_session(session_id)
    try:
        session.send(req.text)
    except ConfigurationBlockedError as e:
        raise _blocked(e)
    return _session_state(session_id, session)

@app.post("/sessions/{session_id}/module", response_model=SessionState, response_model_exclude_none=True)
def switch_session_module(session_id: str, req: SessionModuleRequest):
    REQS.labels("/sessions/{id}/module").inc()
    session = _get_session(session_id)
    session.switch_module(req.module)
    return _session_state(session_id, session)


@app.post("/edge-cases/run", response_model=EdgeCaseRunResponse)
def run_edge_cases(orch: ConversationOrchestrator = Depends(get_orchestrator)):
    REQS.labels("/edge-cases/run").inc()
    results = EdgeCaseRunner(orch, sink=orch.sink).run()
    return EdgeCaseRunResponse(count=len(results), passed=sum(r.passed for r in results), results=results)
