"""Caller-facing entry point.

PersonaEngine owns a model manager and runs one PersonaGraph invocation per
chat turn. Callers own persistence: the persona passed to chat() comes back
with its memory set updated in place and should be saved afterwards.

Only exhausted retries and configuration errors escape chat().
"""

from collections.abc import Iterable

from persona_engine.config import load_model_catalog, settings
from persona_engine.llm_client import (
    ModelCatalog,
    ModelDefinition,
    ModelManager,
    ModelNotInitializedError,
    ProgressCallback,
    UnknownModelError,
)
from persona_engine.memory import MemorySystem
from persona_engine.orchestrator import ChatResponse, GraphIntegrityError, GraphState, PersonaGraph
from persona_engine.persona.models import Message, Persona
from persona_engine.telemetry import TraceContext, get_logger
from persona_engine.telemetry.events import TURN_COMPLETED, TURN_FAILED, TURN_STARTED

log = get_logger(__name__)


class PersonaEngine:
    """Runs persona chat turns against a model manager.

    Attributes:
        model_manager: Streaming chat capability used for every model call.
        graph: The orchestration graph.
    """

    def __init__(
        self,
        model_manager: ModelManager | None = None,
        catalog: ModelCatalog | None = None,
        graph: PersonaGraph | None = None,
    ) -> None:
        """Initialize the engine.

        Args:
            model_manager: Model manager to use. Defaults to a local Ollama manager.
            catalog: Model catalog. Defaults to the catalog at settings.model_config_path,
                loaded on first use.
            graph: Orchestration graph. Defaults to the standard topology.
        """
        if model_manager is None:
            from persona_engine.llm_client import OllamaModelManager  # noqa: PLC0415

            model_manager = OllamaModelManager()
        self.model_manager = model_manager
        self.graph = graph or PersonaGraph()
        self._catalog = catalog

    @property
    def catalog(self) -> ModelCatalog:
        if self._catalog is None:
            self._catalog = load_model_catalog()
        return self._catalog

    def available_models(self) -> list[ModelDefinition]:
        """Return every model a caller may pass to init_model()."""
        return list(self.catalog.models)

    async def init_model(
        self, model_id: str, progress_callback: ProgressCallback | None = None
    ) -> None:
        """Initialize the model manager with a catalog model.

        Raises:
            UnknownModelError: If model_id is not in the catalog.
        """
        model = self.catalog.get(model_id)
        if model is None:
            raise UnknownModelError(f"Model {model_id} not found")
        await self.model_manager.init(model, progress_callback)

    async def chat(
        self,
        persona: Persona,
        message: str,
        context: dict | None = None,
        max_retries: int | None = None,
    ) -> ChatResponse:
        """Run one conversational turn.

        Args:
            persona: Persona to speak as. Its memory set is updated in place.
            message: The user's message.
            context: Optional context map substituted into the prompt template.
            max_retries: Model call attempts before giving up. Defaults to
                settings.graph_max_retries (3).

        Returns:
            The reply. quests is set only when at least one quest was generated.

        Raises:
            ModelNotInitializedError: If init_model() has not completed.
            LLMClientError: Or any other model failure, once retries are exhausted.
        """
        if not self.model_manager.is_ready():
            raise ModelNotInitializedError("Model not initialized")

        trace_ctx = TraceContext.new_trace()
        state = GraphState(
            persona=persona,
            message=message,
            model_manager=self.model_manager,
            context=context,
            max_retries=settings.graph_max_retries if max_retries is None else max_retries,
            backoff_seconds=settings.graph_retry_backoff_seconds,
            trace_id=trace_ctx.trace_id,
        )

        log.info(
            TURN_STARTED,
            trace_id=trace_ctx.trace_id,
            persona_id=persona.id,
            persona_type=persona.type.value,
            message_length=len(message),
            history_length=len(persona.conversation_history),
            memory_count=len(persona.memory),
        )

        try:
            state = await self.graph.invoke(state)
        except Exception as e:
            log.error(
                TURN_FAILED,
                trace_id=trace_ctx.trace_id,
                persona_id=persona.id,
                error=str(e),
                error_type=type(e).__name__,
                retry_count=state.retry_count,
            )
            raise

        if state.parsed_response is None:
            raise GraphIntegrityError("Graph finished without a parsed response")

        response = ChatResponse(
            message=state.parsed_response.message,
            narration=state.parsed_response.narration,
            quests=list(state.generated_quests) if state.generated_quests else None,
        )
        log.info(
            TURN_COMPLETED,
            trace_id=trace_ctx.trace_id,
            persona_id=persona.id,
            retry_count=state.retry_count,
            retrieved_memories=len(state.retrieved_memories),
            extracted_memories=len(state.extracted_memories),
            quests_generated=len(state.generated_quests),
        )
        return response

    def extract_memories(self, persona: Persona, messages: Iterable[Message]) -> None:
        """Store facts found in messages on persona (outside a chat turn)."""
        MemorySystem.extract_and_store_memory(persona, messages)

    def is_ready(self) -> bool:
        return self.model_manager.is_ready()

    async def dispose(self) -> None:
        await self.model_manager.dispose()
