# agripulse/services/screens.py
"""
Per-session view state for the four screens.

Each interactive screen is a small state machine:
IDLE/SUCCEEDED/FAILED -> PENDING on a user action, PENDING -> SUCCEEDED/FAILED
when the model call completes. An action while PENDING is rejected. All of
this runs on the event loop, and the pending check and set happen with no
await between them.
"""
import logging
import uuid
from agripulse.core.config import settings
from agripulse.models.common import Context, ScreenStatus, Tab
from agripulse.models.advisor import AdvisorView, ChatMessage, ChatRole
from agripulse.models.dashboard import DashboardView, QuickAction, SeasonalTip, StatCard
from agripulse.models.diagnostics import DiagnosticImage, DiagnosticsView
from agripulse.models.hybrid import HybridLabView, HybridQuery
from agripulse.models.session import HeaderView, SessionView
from agripulse.services import gemini_client
from agripulse.services.gemini_client import AdvisorUnavailableError

logger = logging.getLogger(__name__)

MARKET_TICKER = "Live Market: Wheat +2.4%"


class RequestPendingError(Exception):
    """A request from this screen is already in flight."""


class ScreenNotActiveError(Exception):
    """The targeted screen is not the session's active tab."""


class SessionNotFoundError(KeyError):
    pass


class ScreenController:
    tab: Tab

    def __init__(self):
        self.status = ScreenStatus.IDLE
        self.error: str | None = None

    @property
    def is_pending(self) -> bool:
        return self.status is ScreenStatus.PENDING

    def _begin_request(self):
        if self.is_pending:
            raise RequestPendingError(f"A {self.tab.value} request is already in progress.")
        self.status = ScreenStatus.PENDING
        self.error = None

    def _succeed(self):
        self.status = ScreenStatus.SUCCEEDED

    def _fail(self, reason: str):
        self.status = ScreenStatus.FAILED
        self.error = reason

    def _abandon(self, exc: BaseException):
        # Cancelled or crashed calls must not leave the screen PENDING
        logger.warning(f"{self.tab.value} request did not complete: {exc!r}")
        self._fail(f"Request did not complete: {type(exc).__name__}")

    def view(self):
        raise NotImplementedError


class DashboardScreen(ScreenController):
    tab = Tab.DASHBOARD

    def view(self) -> DashboardView:
        return DashboardView(
            greeting="Welcome back, Farmer.",
            summary="Here's what's happening on your farm today.",
            stats=[
                StatCard(title="Active Projects", value="4", subtitle="2 nearing harvest"),
                StatCard(title="Market Outlook", value="Positive", subtitle="Maize prices up 5%"),
                StatCard(title="Health Alerts", value="1", subtitle="Potential rust in Plot B"),
            ],
            quick_actions=[
                QuickAction(label="Diagnose a Crop Problem", target=Tab.DIAGNOSTICS),
                QuickAction(label="Get Marketing Advice", target=Tab.ADVISOR),
                QuickAction(label="Explore Hybrid Varieties", target=Tab.HYBRID),
            ],
            seasonal_tip=SeasonalTip(
                title="Seasonal Tip",
                body=(
                    "Current humidity levels are high. Consider adjusting your irrigation schedule "
                    "for the tomato crop to prevent fungal growth."
                ),
                target=Tab.ADVISOR,
            ),
        )


class AdvisorScreen(ScreenController):
    tab = Tab.ADVISOR

    EMPTY_RESPONSE_MESSAGE = "I am sorry, I could not process that."
    ERROR_MESSAGE = "Error connecting to AI advisor. Please try again."

    def __init__(self):
        super().__init__()
        self.context = Context.MANAGEMENT
        self.messages: list[ChatMessage] = []

    def set_context(self, context: Context):
        self.context = Context(context)

    async def send(self, content: str) -> bool:
        """Appends the question and the advisor's reply. Returns False for blank input."""
        if not content or not content.strip():
            return False
        self._begin_request()
        context = self.context
        self.messages.append(ChatMessage(role=ChatRole.USER, content=content))
        try:
            response = await gemini_client.get_advisor_response(content, context)
        except AdvisorUnavailableError as e:
            self.messages.append(ChatMessage(role=ChatRole.AI, content=self.ERROR_MESSAGE))
            self._fail(str(e))
            return True
        except BaseException as e:
            self._abandon(e)
            raise
        if response:
            self.messages.append(ChatMessage(role=ChatRole.AI, content=response))
            self._succeed()
        else:
            self.messages.append(ChatMessage(role=ChatRole.AI, content=self.EMPTY_RESPONSE_MESSAGE))
            self._fail("Empty response from model.")
        return True

    def view(self) -> AdvisorView:
        return AdvisorView(
            status=self.status,
            error=self.error,
            context=self.context,
            messages=list(self.messages),
        )


class DiagnosticsScreen(ScreenController):
    tab = Tab.DIAGNOSTICS

    EMPTY_RESPONSE_MESSAGE = "Analysis failed."
    ERROR_MESSAGE = "Error analyzing image. Please try again."

    def __init__(self):
        super().__init__()
        self.image: DiagnosticImage | None = None
        self.analysis: str | None = None

    def upload(self, image: DiagnosticImage):
        # The analysis shown always belongs to the image shown
        if self.is_pending:
            raise RequestPendingError("Cannot replace the image while an analysis is running.")
        self.image = image
        self.analysis = None
        self.status = ScreenStatus.IDLE
        self.error = None

    async def analyze(self) -> bool:
        if self.image is None:
            return False
        self._begin_request()
        image = self.image
        try:
            result = await gemini_client.analyze_diagnostic_image(image.data_url, image.mime_type)
        except AdvisorUnavailableError as e:
            self.analysis = self.ERROR_MESSAGE
            self._fail(str(e))
            return True
        except BaseException as e:
            self._abandon(e)
            raise
        if result:
            self.analysis = result
            self._succeed()
        else:
            self.analysis = self.EMPTY_RESPONSE_MESSAGE
            self._fail("Empty response from model.")
        return True

    def view(self) -> DiagnosticsView:
        return DiagnosticsView(
            status=self.status,
            error=self.error,
            image_data_url=self.image.data_url if self.image else None,
            mime_type=self.image.mime_type if self.image else None,
            analysis=self.analysis,
        )


class HybridLabScreen(ScreenController):
    tab = Tab.HYBRID

    EMPTY_RESPONSE_MESSAGE = "Simulation failed."
    ERROR_MESSAGE = "Error simulating hybrid. Please try again."

    def __init__(self):
        super().__init__()
        self.parent_a = ""
        self.parent_b = ""
        self.result: str | None = None

    async def simulate(self, query: HybridQuery) -> bool:
        if not query.parent_a.strip() or not query.parent_b.strip():
            return False
        self._begin_request()
        self.parent_a, self.parent_b = query.parent_a, query.parent_b
        try:
            response = await gemini_client.get_advisor_response(query.to_prompt(), Context.HYBRID)
        except AdvisorUnavailableError as e:
            self.result = self.ERROR_MESSAGE
            self._fail(str(e))
            return True
        except BaseException as e:
            self._abandon(e)
            raise
        if response:
            self.result = response
            self._succeed()
        else:
            self.result = self.EMPTY_RESPONSE_MESSAGE
            self._fail("Empty response from model.")
        return True

    def view(self) -> HybridLabView:
        return HybridLabView(
            status=self.status,
            error=self.error,
            parent_a=self.parent_a,
            parent_b=self.parent_b,
            result=self.result,
        )


SCREEN_TYPES: dict[Tab, type[ScreenController]] = {
    Tab.DASHBOARD: DashboardScreen,
    Tab.ADVISOR: AdvisorScreen,
    Tab.DIAGNOSTICS: DiagnosticsScreen,
    Tab.HYBRID: HybridLabScreen,
}


class Session:
    """One user's dashboard: the active tab and the screen mounted for it."""

    def __init__(self, session_id: str | None = None):
        self.session_id = session_id or uuid.uuid4().hex
        self.active_tab = Tab.DASHBOARD
        self.screen: ScreenController = DashboardScreen()

    def navigate(self, tab: Tab) -> bool:
        """
        Switches to `tab`, discarding the state of the screen being left.
        An in-flight request on the old screen completes into the discarded
        controller and is never shown. Returns False if already on `tab`.
        """
        tab = Tab(tab)
        if tab is self.active_tab:
            return False
        logger.info(f"Session {self.session_id[:8]}: {self.active_tab.value} -> {tab.value}")
        self.active_tab = tab
        self.screen = SCREEN_TYPES[tab]()
        return True

    def get_screen(self, tab: Tab) -> ScreenController:
        if Tab(tab) is not self.active_tab:
            raise ScreenNotActiveError(
                f"Screen '{Tab(tab).value}' is not active (current: '{self.active_tab.value}')."
            )
        return self.screen

    def header(self) -> HeaderView:
        name = self.active_tab.value
        return HeaderView(title=name[:1].upper() + name[1:], market_ticker=MARKET_TICKER)

    def view(self) -> SessionView:
        return SessionView(
            session_id=self.session_id,
            active_tab=self.active_tab,
            header=self.header(),
            screen=self.screen.view(),
        )


class SessionStore:
    """
    In-memory sessions; nothing survives a restart. Holds at most
    `max_sessions`, evicting the oldest when a new one is created.
    """

    def __init__(self, max_sessions: int | None = None):
        self.max_sessions = max_sessions if max_sessions is not None else settings.MAX_SESSIONS
        self._sessions: dict[str, Session] = {}

    def create(self) -> Session:
        while self._sessions and len(self._sessions) >= self.max_sessions:
            # dicts keep insertion order, so the first key is the oldest session
            oldest_id = next(iter(self._sessions))
            del self._sessions[oldest_id]
            logger.info(f"Evicted session {oldest_id[:8]} (limit {self.max_sessions})")
        session = Session()
        self._sessions[session.session_id] = session
        logger.info(f"Created session {session.session_id[:8]}")
        return session

    def get(self, session_id: str) -> Session:
        try:
            return self._sessions[session_id]
        except KeyError:
            raise SessionNotFoundError(session_id) from None

    def remove(self, session_id: str):
        if self._sessions.pop(session_id, None) is None:
            raise SessionNotFoundError(session_id)
        logger.info(f"Closed session {session_id[:8]}")

    def __len__(self):
        return len(self._sessions)


session_store = SessionStore()
