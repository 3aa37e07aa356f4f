"""
twistlint/codepath.py
═════════════════════

Path-sensitive ``super()`` analysis of class constructors.

The analysis is an abstract interpretation over the statements of one
constructor body.  The abstract state at a program point is the set of
"has ``super()`` been called" facts that reach it:

    frozenset()         unreachable
    {NOT_CALLED}        every path so far lacks the call
    {CALLED}            every path so far made the call
    {NOT_CALLED, CALLED} paths disagree

Control flow follows ECMAScript semantics closely enough for the check:

  * ``if`` / ``?:`` / ``&&`` / ``||`` / ``??`` fork and join
  * loops are iterated to a fixpoint (the state lattice has height 2)
  * ``break`` / ``continue`` (labelled or not) join at their target
  * ``switch`` falls through and, without ``default``, may skip all cases
  * a ``catch`` block is entered with every state observed in its ``try``
  * ``finally`` runs on normal completion and on returns
  * ``return <expr>`` counts as a call (the returned object replaces ``this``)
  * ``throw`` does not end a path that needs the call
  * nested functions and classes are separate and are not entered

Per-call states are accumulated over the fixpoint, so a call reached a
second time by a loop's back edge is seen with ``CALLED`` and reported as
a duplicate.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, FrozenSet, List, Optional, Sequence, Tuple

from twistlint.nodes import (
    CLASS_TYPES,
    FUNCTION_TYPES,
    AssignmentExpression,
    BlockStatement,
    BreakStatement,
    CallExpression,
    ConditionalExpression,
    ContinueStatement,
    DoWhileStatement,
    ExpressionStatement,
    ForInStatement,
    ForOfStatement,
    ForStatement,
    IfStatement,
    LabeledStatement,
    Literal,
    LogicalExpression,
    MethodDefinition,
    Node,
    ReturnStatement,
    Super,
    SwitchStatement,
    ThrowStatement,
    TryStatement,
    VariableDeclaration,
    WhileStatement,
)

logger = logging.getLogger(__name__)

NOT_CALLED = 0
CALLED = 1

State = FrozenSet[int]

UNREACHABLE: State = frozenset()
START: State = frozenset({NOT_CALLED})
AFTER_CALL: State = frozenset({CALLED})

_LOOP_TYPES = (WhileStatement, DoWhileStatement, ForStatement, ForInStatement, ForOfStatement)
_SHORT_CIRCUIT = frozenset({"&&", "||", "??", "&&=", "||=", "??="})


class SuperProblem(Enum):
    """Problems reported by the constructor analysis, keyed by error id."""
    MISSING = "missingSuper"
    MISSING_SOME = "missingSomeSuper"
    DUPLICATE = "duplicateSuper"
    BAD_SUPER = "badSuper"
    UNEXPECTED = "unexpectedSuper"

    @property
    def message(self) -> str:
        return _MESSAGES[self]


_MESSAGES = {
    SuperProblem.MISSING: "Expected to call 'super()'.",
    SuperProblem.MISSING_SOME: "Lacked a call of 'super()' in some code paths.",
    SuperProblem.DUPLICATE: "Unexpected duplicate 'super()'.",
    SuperProblem.BAD_SUPER: "Unexpected 'super()' because 'super' is not a constructor.",
    SuperProblem.UNEXPECTED: "Unexpected 'super()'.",
}


@dataclass(frozen=True)
class ConstructorFinding:
    node: Node
    problem: SuperProblem

    @property
    def message(self) -> str:
        return self.problem.message


@dataclass
class _JumpTarget:
    labels: FrozenSet[str]
    is_loop: bool
    is_breakable: bool
    breaks: State = UNREACHABLE
    continues: State = UNREACHABLE


@dataclass
class _TryContext:
    has_finalizer: bool
    collecting: bool = True
    observed: State = UNREACHABLE
    pending_returns: State = UNREACHABLE


@dataclass
class PathSummary:
    """Raw result of walking one constructor body."""
    exit_states: State = UNREACHABLE
    call_states: Dict[int, State] = field(default_factory=dict)
    calls: List[CallExpression] = field(default_factory=list)

    def states_at(self, call: CallExpression) -> State:
        return self.call_states.get(id(call), UNREACHABLE)


def _split_on_test(test: Optional[Node], states: State) -> Tuple[State, State]:
    """States after a loop test: (leaving the loop, entering the body).

    A missing test loops forever and a literal test is folded, so
    ``while (true)`` only leaves through ``break`` and the body of a
    ``do ... while (false)`` runs once.
    """
    if test is None:
        return UNREACHABLE, states
    if isinstance(test, Literal):
        return (UNREACHABLE, states) if test.value else (states, UNREACHABLE)
    return states, states


class _PathWalker:

    def __init__(self) -> None:
        self.summary = PathSummary()
        self._targets: List[_JumpTarget] = []
        self._tries: List[_TryContext] = []
        self._exits: State = UNREACHABLE

    # ── bookkeeping ──────────────────────────────────────────────

    def _observe(self, states: State) -> None:
        if not states:
            return
        for ctx in self._tries:
            if ctx.collecting:
                ctx.observed |= states

    def _record_call(self, call: CallExpression, states: State) -> None:
        if not states:
            return
        key = id(call)
        if key not in self.summary.call_states:
            self.summary.calls.append(call)
            self.summary.call_states[key] = UNREACHABLE
        self.summary.call_states[key] |= states

    def _exit(self, states: State) -> None:
        if not states:
            return
        for ctx in reversed(self._tries):
            if ctx.has_finalizer:
                ctx.pending_returns |= states
                return
        self._exits |= states

    # ── statements ───────────────────────────────────────────────

    def statements(self, nodes: Sequence[Node], states: State) -> State:
        for node in nodes:
            states = self.statement(node, states)
        return states

    def statement(self, node: Optional[Node], states: State,
                  labels: FrozenSet[str] = frozenset()) -> State:
        if node is None:
            return states
        self._observe(states)

        if isinstance(node, BlockStatement):
            return self.statements(node.body, states)
        if isinstance(node, ExpressionStatement):
            return self.expression(node.expression, states)
        if isinstance(node, VariableDeclaration):
            for declarator in node.declarations:
                states = self.expression(declarator.init, states)
            return states
        if isinstance(node, IfStatement):
            test = self.expression(node.test, states)
            consequent = self.statement(node.consequent, test)
            alternate = self.statement(node.alternate, test) if node.alternate else test
            return consequent | alternate
        if isinstance(node, ReturnStatement):
            after = self.expression(node.argument, states)
            if node.argument is not None and after:
                after = AFTER_CALL
            self._exit(after)
            return UNREACHABLE
        if isinstance(node, ThrowStatement):
            self._observe(self.expression(node.argument, states))
            return UNREACHABLE
        if isinstance(node, BreakStatement):
            target = self._find_target(node.label, for_continue=False)
            if target is not None:
                target.breaks |= states
            return UNREACHABLE
        if isinstance(node, ContinueStatement):
            target = self._find_target(node.label, for_continue=True)
            if target is not None:
                target.continues |= states
            return UNREACHABLE
        if isinstance(node, LabeledStatement):
            return self._labeled(node, states, labels | {node.label.name})
        if isinstance(node, _LOOP_TYPES):
            return self._loop(node, states, labels)
        if isinstance(node, SwitchStatement):
            return self._switch(node, states, labels)
        if isinstance(node, TryStatement):
            return self._try(node, states)
        # declarations of nested functions/classes, empty statements, imports
        return states

    def _find_target(self, label: Optional[Node], for_continue: bool) -> Optional[_JumpTarget]:
        for target in reversed(self._targets):
            if label is not None:
                if label.name in target.labels:
                    return target
                continue
            if for_continue and target.is_loop:
                return target
            if not for_continue and target.is_breakable:
                return target
        return None

    def _labeled(self, node: LabeledStatement, states: State, labels: FrozenSet[str]) -> State:
        body = node.body
        if isinstance(body, LabeledStatement):
            return self._labeled(body, states, labels | {body.label.name})
        if isinstance(body, _LOOP_TYPES + (SwitchStatement,)):
            return self.statement(body, states, labels)
        target = _JumpTarget(labels, is_loop=False, is_breakable=False)
        self._targets.append(target)
        try:
            result = self.statement(body, states)
        finally:
            self._targets.pop()
        return result | target.breaks

    def _loop(self, node: Node, states: State, labels: FrozenSet[str]) -> State:
        if isinstance(node, ForStatement):
            if isinstance(node.init, VariableDeclaration):
                states = self.statement(node.init, states)
            else:
                states = self.expression(node.init, states)
        elif isinstance(node, (ForInStatement, ForOfStatement)):
            states = self.expression(node.right, states)

        entry = states
        while True:
            target = _JumpTarget(labels, is_loop=True, is_breakable=True)
            self._targets.append(target)
            try:
                exit_states, back_edge = self._loop_iteration(node, entry, target)
            finally:
                self._targets.pop()
            next_entry = states | back_edge
            if next_entry == entry:
                return exit_states | target.breaks
            entry = next_entry

    def _loop_iteration(self, node: Node, entry: State, target: _JumpTarget):
        """One pass over a loop: (states leaving normally, states on the back edge)."""
        if isinstance(node, DoWhileStatement):
            body = self.statement(node.body, entry)
            test = self.expression(node.test, body | target.continues)
            return _split_on_test(node.test, test)
        if isinstance(node, WhileStatement):
            test = self.expression(node.test, entry)
            leave, enter = _split_on_test(node.test, test)
            body = self.statement(node.body, enter)
            return leave, body | target.continues
        if isinstance(node, ForStatement):
            test = self.expression(node.test, entry)
            leave, enter = _split_on_test(node.test, test)
            body = self.statement(node.body, enter)
            update = self.expression(node.update, body | target.continues)
            return leave, update
        # for-in / for-of: zero or more iterations
        body = self.statement(node.body, entry)
        return entry, body | target.continues

    def _switch(self, node: SwitchStatement, states: State, labels: FrozenSet[str]) -> State:
        discriminant = self.expression(node.discriminant, states)
        target = _JumpTarget(labels, is_loop=False, is_breakable=True)
        self._targets.append(target)
        try:
            fall = UNREACHABLE
            has_default = False
            for case in node.cases:
                if case.test is None:
                    has_default = True
                else:
                    self.expression(case.test, discriminant)
                fall = self.statements(case.consequent, discriminant | fall)
        finally:
            self._targets.pop()
        result = fall | target.breaks
        if not has_default:
            result |= discriminant
        return result

    def _try(self, node: TryStatement, states: State) -> State:
        ctx = _TryContext(has_finalizer=node.finalizer is not None)
        self._tries.append(ctx)
        try:
            block = self.statement(node.block, states)
            ctx.collecting = False
            normal = block
            if node.handler is not None:
                caught = ctx.observed | states | block
                normal |= self.statement(node.handler.body, caught)
        finally:
            self._tries.pop()

        if node.finalizer is None:
            return normal
        if ctx.pending_returns:
            self._exit(self.statement(node.finalizer, ctx.pending_returns))
        if normal:
            return self.statement(node.finalizer, normal)
        # only reached through exceptions; keeps its calls reachable
        self.statement(node.finalizer, ctx.observed | states)
        return UNREACHABLE

    # ── expressions ──────────────────────────────────────────────

    def expression(self, node: Optional[Node], states: State) -> State:
        if node is None or not states:
            return states
        if isinstance(node, FUNCTION_TYPES + CLASS_TYPES):
            return states
        if isinstance(node, CallExpression):
            if isinstance(node.callee, Super):
                for argument in node.arguments:
                    states = self.expression(argument, states)
                self._record_call(node, states)
                self._observe(AFTER_CALL)
                return AFTER_CALL
            states = self.expression(node.callee, states)
            for argument in node.arguments:
                states = self.expression(argument, states)
            return states
        if isinstance(node, LogicalExpression):
            left = self.expression(node.left, states)
            return left | self.expression(node.right, left)
        if isinstance(node, AssignmentExpression) and node.operator in _SHORT_CIRCUIT:
            left = self.expression(node.left, states)
            return left | self.expression(node.right, left)
        if isinstance(node, ConditionalExpression):
            test = self.expression(node.test, states)
            return self.expression(node.consequent, test) | self.expression(node.alternate, test)
        for child in node.child_nodes():
            states = self.expression(child, states)
        return states

    def run(self, body: BlockStatement) -> PathSummary:
        end = self.statements(body.body, START)
        self.summary.exit_states = self._exits | end
        return self.summary


def walk_constructor(method: MethodDefinition) -> PathSummary:
    """Walk the body of constructor *method* and summarise its paths."""
    return _PathWalker().run(method.value.body)


def analyze_constructor(
    method: MethodDefinition,
    derived: bool,
    super_is_constructor: bool = True,
) -> List[ConstructorFinding]:
    """
    Check the ``super()`` calls of constructor *method*.

    Parameters
    ----------
    derived              : whether the class has (or is given) a base class
    super_is_constructor : whether the base class expression can be a
                           constructor at all (``extends null`` cannot)
    """
    summary = walk_constructor(method)
    findings: List[ConstructorFinding] = []

    if derived:
        exits = summary.exit_states
        if NOT_CALLED in exits:
            problem = SuperProblem.MISSING_SOME if CALLED in exits else SuperProblem.MISSING
            findings.append(ConstructorFinding(method, problem))
        for call in summary.calls:
            states = summary.states_at(call)
            if CALLED in states:
                findings.append(ConstructorFinding(call, SuperProblem.DUPLICATE))
            elif not super_is_constructor:
                findings.append(ConstructorFinding(call, SuperProblem.BAD_SUPER))
    else:
        for call in summary.calls:
            findings.append(ConstructorFinding(call, SuperProblem.UNEXPECTED))

    findings.sort(key=lambda f: (f.node.line, f.node.column))
    logger.debug("constructor at %d:%d: %d super() calls, %d findings",
                 method.line, method.column, len(summary.calls), len(findings))
    return findings


__all__ = [
    "NOT_CALLED",
    "CALLED",
    "SuperProblem",
    "ConstructorFinding",
    "PathSummary",
    "walk_constructor",
    "analyze_constructor",
]
