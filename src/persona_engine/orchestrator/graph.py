"""Persona graph: the fixed orchestration state machine for one turn.

The topology is data. EDGES maps a node to its fixed successor and
CONDITIONAL_EDGES maps a node to a router plus the route map its return value
is looked up in. PersonaGraph.invoke walks the table from retrieve_memory to
end, merging every node's patch into the shared GraphState.

    retrieve_memory -> format_prompt -> llm_call
    llm_call --continue--> extract_memory
    llm_call --retry|fail--> handle_error -> llm_call
    extract_memory -> update_importance -> store_memory
    store_memory --generate_quest--> generate_quest -> end
    store_memory --end--> end
"""

import dataclasses
from collections.abc import Awaitable, Callable, Mapping
from typing import Any, NoReturn

from persona_engine.config import settings
from persona_engine.orchestrator import nodes
from persona_engine.orchestrator.quest import (
    EDGE_QUEST_TRIGGERS,
    generate_quest,
    has_quest_keywords,
    is_quest_persona,
)
from persona_engine.orchestrator.types import GraphIntegrityError, GraphNode, GraphState
from persona_engine.telemetry import get_logger
from persona_engine.telemetry.events import GRAPH_INTEGRITY_ERROR, STATE_TRANSITION

log = get_logger(__name__)

NodeFunction = Callable[[GraphState], Awaitable[dict[str, Any]]]
Router = Callable[[GraphState], str]

ENTRY_NODE = GraphNode.RETRIEVE_MEMORY

_STATE_FIELDS = frozenset(f.name for f in dataclasses.fields(GraphState))


def should_retry(state: GraphState) -> str:
    """Route after llm_call: "continue", "retry" or "fail"."""
    if state.error is not None and state.retry_count < state.max_retries:
        return "retry"
    if state.error is not None:
        return "fail"
    return "continue"


def should_generate_quest_route(state: GraphState) -> str:
    """Route after store_memory: "generate_quest" or "end"."""
    if state.parsed_response is None:
        return "end"
    if has_quest_keywords(state, EDGE_QUEST_TRIGGERS) or is_quest_persona(state.persona):
        return "generate_quest"
    return "end"


NODE_FUNCTIONS: dict[GraphNode, NodeFunction] = {
    GraphNode.RETRIEVE_MEMORY: nodes.retrieve_memory,
    GraphNode.FORMAT_PROMPT: nodes.format_prompt,
    GraphNode.LLM_CALL: nodes.llm_call,
    GraphNode.HANDLE_ERROR: nodes.handle_error,
    GraphNode.EXTRACT_MEMORY: nodes.extract_memory,
    GraphNode.UPDATE_IMPORTANCE: nodes.update_importance,
    GraphNode.STORE_MEMORY: nodes.store_memory,
    GraphNode.GENERATE_QUEST: generate_quest,
}

EDGES: dict[GraphNode, GraphNode] = {
    GraphNode.RETRIEVE_MEMORY: GraphNode.FORMAT_PROMPT,
    GraphNode.FORMAT_PROMPT: GraphNode.LLM_CALL,
    GraphNode.HANDLE_ERROR: GraphNode.LLM_CALL,
    GraphNode.EXTRACT_MEMORY: GraphNode.UPDATE_IMPORTANCE,
    GraphNode.UPDATE_IMPORTANCE: GraphNode.STORE_MEMORY,
    GraphNode.GENERATE_QUEST: GraphNode.END,
}

CONDITIONAL_EDGES: dict[GraphNode, tuple[Router, dict[str, GraphNode]]] = {
    GraphNode.LLM_CALL: (
        should_retry,
        {
            "continue": GraphNode.EXTRACT_MEMORY,
            "retry": GraphNode.HANDLE_ERROR,
            "fail": GraphNode.HANDLE_ERROR,  # handle_error raises once retries are exhausted
        },
    ),
    GraphNode.STORE_MEMORY: (
        should_generate_quest_route,
        {
            "generate_quest": GraphNode.GENERATE_QUEST,
            "end": GraphNode.END,
        },
    ),
}


class PersonaGraph:
    """Executes the node/edge table for one GraphState at a time.

    The tables default to the module-level topology; they are parameters so a
    malformed table can be exercised in tests.

    Attributes:
        max_iterations: Ceiling on node executions per invocation.
    """

    def __init__(
        self,
        node_functions: Mapping[GraphNode, NodeFunction] | None = None,
        edges: Mapping[GraphNode, GraphNode] | None = None,
        conditional_edges: Mapping[GraphNode, tuple[Router, dict[str, GraphNode]]] | None = None,
        max_iterations: int | None = None,
    ) -> None:
        self.node_functions = NODE_FUNCTIONS if node_functions is None else node_functions
        self.edges = EDGES if edges is None else edges
        self.conditional_edges = (
            CONDITIONAL_EDGES if conditional_edges is None else conditional_edges
        )
        self.max_iterations = max_iterations or settings.graph_max_iterations

    async def invoke(self, state: GraphState) -> GraphState:
        """Run the graph from retrieve_memory until end.

        Nodes run strictly one after another. Exceptions raised by a node
        (exhausted retries in handle_error) propagate unchanged.

        Args:
            state: Fresh state for this turn; mutated in place.

        Returns:
            The same state, in its terminal form.

        Raises:
            GraphIntegrityError: On an unknown node, unknown route, unknown
                patch field, or more than max_iterations transitions.
        """
        node = ENTRY_NODE
        iterations = 0

        while node is not GraphNode.END:
            iterations += 1
            if iterations > self.max_iterations:
                self._fail(
                    state,
                    f"Graph exceeded {self.max_iterations} transitions (last node: {node.value})",
                )

            node_func = self.node_functions.get(node)
            if node_func is None:
                self._fail(state, f"Unknown graph node: {node}")

            patch = await node_func(state)
            self._apply_patch(state, node, patch)

            next_node = self._next_node(state, node)
            log.info(
                STATE_TRANSITION,
                trace_id=state.trace_id,
                from_node=node.value,
                to_node=next_node.value,
                iteration=iterations,
            )
            node = next_node

        return state

    def _next_node(self, state: GraphState, node: GraphNode) -> GraphNode:
        if node in self.conditional_edges:
            router, routes = self.conditional_edges[node]
            route = router(state)
            if route not in routes:
                self._fail(state, f"Unknown route '{route}' from node {node.value}")
            return routes[route]

        if node in self.edges:
            return self.edges[node]

        self._fail(state, f"No outgoing edge from node {node.value}")

    def _apply_patch(self, state: GraphState, node: GraphNode, patch: dict[str, Any]) -> None:
        unknown = set(patch) - _STATE_FIELDS
        if unknown:
            self._fail(state, f"Node {node.value} returned unknown state fields: {sorted(unknown)}")
        for name, value in patch.items():
            setattr(state, name, value)

    def _fail(self, state: GraphState, reason: str) -> NoReturn:
        log.error(GRAPH_INTEGRITY_ERROR, trace_id=state.trace_id, reason=reason)
        raise GraphIntegrityError(reason)
