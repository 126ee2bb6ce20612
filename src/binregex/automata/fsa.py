import sys
from collections import deque

from loguru import logger

# Marker constants


class Marker:
    """
    Represents a marker object.

    Markers are used as transition labels that can never be confused with an
    input symbol, such as the epsilon label of a Thompson NFA.

    Attributes:
        name (str): The name of the marker.

    Example:
        >>> EPSILON
        <EPSILON>
    """

    def __init__(self, name):
        self.name = name

    def __repr__(self):
        return f"<{self.name}>"


EPSILON = Marker("EPSILON")

# The two input symbols, in the order used for every traversal and listing
ALPHABET = ("0", "1")


# Base class
class FSA:
    """
    Finite State Automaton (FSA) base class.

    States are dense integers ``0 .. len(fsa) - 1`` allocated with
    :meth:`new_state`, so a state number is stable for the lifetime of the
    automaton that created it.

    Attributes:
        initial (int): The initial state of the automaton.
        transitions (dict): Maps each source state to a dictionary of labels
            and destinations. The shape of the destinations depends on the
            subclass.
        final_states (set): The accepting states of the automaton.
        statecount (int): The number of states allocated so far.
    """

    def __init__(self, initial=0):
        self.initial = initial
        self.transitions = {}
        self.final_states = set()
        self.statecount = 0

    def __len__(self):
        """
        Returns the number of states in the automaton.
        """
        return self.statecount

    def __eq__(self, other):
        if type(self) is not type(other):
            return False
        return (
            self.initial == other.initial
            and self.statecount == other.statecount
            and self.final_states == other.final_states
            and self.transitions == other.transitions
        )

    # Automata are mutable and compare by content, so they are not hashable
    __hash__ = None

    def all_states(self):
        return range(self.statecount)

    def new_state(self):
        """
        Allocates a new state number.

        Returns:
            int: The new state, which is one greater than the previous one.
        """
        state = self.statecount
        self.statecount += 1
        self.transitions[state] = {}
        return state

    def start(self):
        return self.initial

    def is_final(self, state):
        raise NotImplementedError

    def next_state(self, state, label):
        raise NotImplementedError

    def add_transition(self, src, label, dest):
        raise NotImplementedError

    def add_final_state(self, state):
        assert 0 <= state < self.statecount, state
        self.final_states.add(state)

    def accept(self, string):
        """
        Checks if a given string is accepted by the automaton. Each step is
        logged at trace level.

        Args:
            string (str): The string to check, made of alphabet symbols.

        Returns:
            bool: True if the string is accepted, False otherwise.
        """
        state = self.start()
        for label in string:
            logger.trace("{} -> {} ->", state, label)
            state = self.next_state(state, label)
            if state is None:
                return False

        return self.is_final(state)


# Implementations


class NFA(FSA):
    """
    Non-deterministic finite automaton over dense integer states.

    The transition table maps ``src -> {label: set(dest)}``. A Thompson
    construction produces an NFA with :data:`EPSILON` labels;
    :meth:`remove_epsilon` folds them away, and :meth:`to_dfa` performs the
    subset construction.
    """

    def dump(self, stream=sys.stdout):
        """
        Prints a textual representation of the NFA to the specified stream.

        Each state is printed on its own line, prefixed with ``@`` when it is
        the initial state and suffixed with ``||`` when it is final, followed
        by one indented line per label.

        Args:
            stream (file): The stream to print to. Defaults to sys.stdout.
        """
        for src in self.all_states():
            beg = "@" if src == self.initial else " "
            end = "||" if src in self.final_states else ""
            print(beg, src, end, file=stream)
            xs = self.transitions[src]
            for label in sorted(xs, key=_label_key):
                print("   ", label, "->", sorted(xs[label]), file=stream)

    def start(self):
        """
        Returns the set of states the NFA starts in, including the states
        reachable from the initial state by epsilon transitions.
        """
        return frozenset(self.closure(self.initial))

    def add_transition(self, src, label, dest):
        """
        Adds a transition from the source state to the destination state
        with the given label.

        Args:
            src (int): The source state.
            label: An alphabet symbol or :data:`EPSILON`.
            dest (int): The destination state.
        """
        assert 0 <= src < self.statecount, src
        assert 0 <= dest < self.statecount, dest
        self.transitions[src].setdefault(label, set()).add(dest)

    def triples(self):
        """
        Generates all (source state, label, destination state) triples, in
        state order and with the destinations of each label sorted.
        """
        for src in self.all_states():
            trans = self.transitions[src]
            for label in sorted(trans, key=_label_key):
                for dest in sorted(trans[label]):
                    yield src, label, dest

    def is_final(self, states):
        """
        Checks if any of the given states is a final state.

        Args:
            states (set): The set of states to check.

        Returns:
            bool: True if any of the states is a final state.
        """
        return bool(self.final_states.intersection(states))

    def closure(self, state):
        """
        Returns the epsilon closure of a single state: the state itself plus
        every state reachable from it using only epsilon transitions.

        Args:
            state (int): The state to expand.

        Returns:
            set: The closure.
        """
        transitions = self.transitions
        closure = {state}
        stack = [state]
        while stack:
            src = stack.pop()
            for dest in transitions[src].get(EPSILON, ()):
                if dest not in closure:
                    closure.add(dest)
                    stack.append(dest)
        return closure

    def closures(self):
        """
        Computes the epsilon closure of every state, once per state.

        Returns:
            list: ``closures[s]`` is the closure of state ``s``.
        """
        return [self.closure(state) for state in self.all_states()]

    def next_state(self, states, label):
        """
        Returns the set of states that can be reached from the given states
        with the specified label, expanded by epsilon transitions.

        Args:
            states (set): The set of states to start from.
            label (str): The input symbol.

        Returns:
            frozenset: The set of states that can be reached.
        """
        dest_states = set()
        for state in states:
            dest_states.update(self.transitions[state].get(label, ()))

        expanded = set()
        for state in dest_states:
            expanded.update(self.closure(state))
        return frozenset(expanded)

    def move(self, states, label):
        """
        Returns the union of the direct ``label`` successors of the given
        states, without following epsilon transitions.
        """
        dests = set()
        for state in states:
            dests.update(self.transitions[state].get(label, ()))
        return frozenset(dests)

    def remove_epsilon(self):
        """
        Returns an equivalent NFA without epsilon transitions.

        The new automaton keeps the same state numbers and initial state. A
        state is final if any state in its epsilon closure is final, and its
        transitions on a symbol lead to the closures of the symbol
        successors of every state in its closure.

        All closures are computed from this (unchanged) automaton before any
        transitions are folded.

        Returns:
            NFA: The epsilon-free automaton.
        """
        closures = self.closures()

        nfa = NFA(self.initial)
        for _ in self.all_states():
            nfa.new_state()

        for state in self.all_states():
            closure = closures[state]
            if self.is_final(closure):
                nfa.add_final_state(state)

            for label in ALPHABET:
                for mid in sorted(closure):
                    for dest in sorted(self.transitions[mid].get(label, ())):
                        for target in closures[dest]:
                            nfa.add_transition(state, label, target)

        logger.debug(
            "Removed epsilon transitions from {} states ({} final)",
            len(nfa),
            len(nfa.final_states),
        )
        return nfa

    def to_dfa(self):
        """
        Converts an epsilon-free NFA to a total DFA with the subset
        construction.

        Subsets are discovered breadth-first from ``{initial}`` and numbered
        in discovery order. Symbols with no possible move lead to a trap
        state, which is always created as the last state and loops to
        itself on both symbols.

        Returns:
            DFA: The converted DFA, with its ``trap`` attribute set.
        """
        assert not any(EPSILON in trans for trans in self.transitions.values())

        start = frozenset([self.initial])
        ids = {start: 0}
        order = [start]
        rows = []
        queue = deque([start])
        while queue:
            current = queue.popleft()
            row = []
            for label in ALPHABET:
                target = self.move(current, label)
                if not target:
                    # No possible move, resolved to the trap below
                    row.append(-1)
                    continue
                if target not in ids:
                    ids[target] = len(order)
                    order.append(target)
                    queue.append(target)
                row.append(ids[target])
            rows.append(row)

        # Empty moves are never queued, so the empty subset is always added
        trap = len(order)
        order.append(frozenset())
        rows.append([-1] * len(ALPHABET))

        dfa = DFA(0)
        for subset in order:
            state = dfa.new_state()
            if self.is_final(subset):
                dfa.add_final_state(state)
        for state, row in enumerate(rows):
            for label, dest in zip(ALPHABET, row):
                dfa.add_transition(state, label, trap if dest < 0 else dest)
        dfa.trap = trap

        logger.debug(
            "Subset construction built {} DFA states from {} NFA states",
            len(dfa),
            len(self),
        )
        return dfa


class DFA(FSA):
    """
    Deterministic finite automaton over the binary alphabet.

    Every state has exactly one slot per symbol of :data:`ALPHABET`. A slot
    holds a destination state, or ``None`` for "no transition". A DFA built
    by :meth:`NFA.to_dfa` is total and names its dead state in ``trap``;
    :meth:`remove_trap` turns the moves into the trap back into ``None``.

    Attributes:
        trap (int or None): The trap (dead) state, or None once removed.
    """

    def __init__(self, initial=0):
        super().__init__(initial)
        self.trap = None

    def __eq__(self, other):
        return super().__eq__(other) and self.trap == other.trap

    __hash__ = None

    def dump(self, stream=sys.stdout):
        """
        Prints a textual representation of the DFA to the specified stream.

        Example:
            >>> dfa = NFA(...).to_dfa()
            >>> dfa.dump()
            @ 0
               0 -> 1
               1 -> 2
             1 ||
               0 -> 2
               1 -> 2
             2 (trap)
               0 -> 2
               1 -> 2
        """
        for src in self.all_states():
            beg = "@" if src == self.initial else " "
            end = "||" if src in self.final_states else ""
            if src == self.trap:
                end += "(trap)"
            print(beg, src, end, file=stream)
            for label in ALPHABET:
                print("   ", label, "->", self.transitions[src][label], file=stream)

    def new_state(self):
        state = super().new_state()
        self.transitions[state] = dict.fromkeys(ALPHABET)
        return state

    def add_transition(self, src, label, dest):
        """
        Sets the slot of ``src`` for ``label`` to ``dest``, replacing any
        previous destination.
        """
        assert 0 <= src < self.statecount, src
        assert dest is None or 0 <= dest < self.statecount, dest
        assert label in ALPHABET, label
        self.transitions[src][label] = dest

    def is_final(self, state):
        return state in self.final_states

    def next_state(self, src, label):
        """
        Returns the destination of ``src`` on ``label``, or None if the slot
        is empty or ``label`` is not an alphabet symbol.
        """
        return self.transitions[src].get(label)

    def successors(self, src):
        """
        Returns the two slots of ``src`` as a tuple in alphabet order.
        """
        trans = self.transitions[src]
        return tuple(trans[label] for label in ALPHABET)

    def is_total(self):
        """
        Returns True if every state has a destination for both symbols.
        """
        return all(
            dest is not None
            for src in self.all_states()
            for dest in self.successors(src)
        )

    def is_sink(self, state):
        """
        Returns True if the state has no outgoing transitions at all.
        """
        return all(dest is None for dest in self.successors(state))

    def reachable_from(self, src, inclusive=True):
        """
        Returns the set of states that can be reached from the specified
        source state.

        Args:
            src (int): The source state.
            inclusive (bool, optional): Whether the source state itself is
                included even when no path leads back to it. Defaults to
                True.

        Returns:
            set: The set of reachable states.
        """
        reached = set()
        if inclusive:
            reached.add(src)

        stack = [src]
        seen = set()
        while stack:
            state = stack.pop()
            seen.add(state)
            for dest in self.successors(state):
                if dest is None:
                    continue
                reached.add(dest)
                if dest not in seen:
                    stack.append(dest)
        return reached

    def generate_all(self, maxlen):
        """
        Yields every accepted string of at most ``maxlen`` symbols, shortest
        first and in lexicographic order within one length.
        """
        level = [("", self.initial)]
        for _ in range(maxlen + 1):
            for sofar, state in level:
                if self.is_final(state):
                    yield sofar
            nextlevel = []
            for sofar, state in level:
                for label, dest in zip(ALPHABET, self.successors(state)):
                    if dest is not None:
                        nextlevel.append((sofar + label, dest))
            level = nextlevel

    def copy(self):
        dfa = DFA(self.initial)
        for src in self.all_states():
            dfa.new_state()
            dfa.transitions[src].update(self.transitions[src])
        dfa.final_states = set(self.final_states)
        dfa.trap = self.trap
        return dfa

    def minimize(self):
        """
        Returns the minimal DFA equivalent to this total DFA, using Moore's
        partition refinement.

        Steps:
        1. Partition the states into non-accepting and accepting classes.
        2. Split every class by the classes of the two successors. New class
           numbers are handed out in the order their keys are first seen
           while walking the states in order.
        3. Repeat until a pass leaves the number of classes unchanged.
        4. Build one state per class. The lowest state of each class
           supplies the transitions, remapped through the final partition.

        The initial and trap states of the result are the classes of the
        original initial and trap states.

        Returns:
            DFA: The minimized automaton. This DFA is not modified.
        """
        assert self.is_total(), "minimize() needs a total DFA"
        states = self.all_states()

        parts = [1 if self.is_final(s) else 0 for s in states]
        count = len(set(parts))
        passes = 0
        while True:
            passes += 1
            keys = {}
            new_parts = []
            for state in states:
                key = (parts[state],) + tuple(
                    parts[dest] for dest in self.successors(state)
                )
                if key not in keys:
                    keys[key] = len(keys)
                new_parts.append(keys[key])

            parts = new_parts
            if len(keys) == count:
                break
            count = len(keys)

        # Choose the lowest state from each class as its representative
        reps = {}
        for state in states:
            reps.setdefault(parts[state], state)

        dfa = DFA(parts[self.initial])
        for cls in range(count):
            dfa.new_state()
        for cls in range(count):
            rep = reps[cls]
            for label, dest in zip(ALPHABET, self.successors(rep)):
                dfa.add_transition(cls, label, parts[dest])
        dfa.final_states = {parts[s] for s in self.final_states}
        if self.trap is not None:
            dfa.trap = parts[self.trap]

        assert len(dfa) <= len(self)
        logger.debug(
            "Minimized {} DFA states to {} in {} passes", len(self), len(dfa), passes
        )
        return dfa

    def remove_trap(self):
        """
        Removes the trap state in place: every move into the trap becomes
        "no transition", and the trap itself loses its moves. Calling this
        again once the trap is gone does nothing.
        """
        trap = self.trap
        if trap is None:
            return

        for src in self.all_states():
            trans = self.transitions[src]
            for label in ALPHABET:
                if trans[label] == trap:
                    trans[label] = None
        self.transitions[trap] = dict.fromkeys(ALPHABET)
        self.final_states.discard(trap)
        self.trap = None
        logger.debug("Removed trap state {}", trap)


# Useful functions


def prune_dfa(dfa):
    """
    Returns a copy of the DFA without the states that cannot be reached from
    its initial state.

    Surviving states are renumbered densely, keeping their relative order,
    so the initial state of the result is always reachable and every
    non-empty slot points at a state that is reachable too.

    Args:
        dfa (DFA): The DFA to prune. It is not modified.

    Returns:
        DFA: The pruned DFA.
    """
    reachable = sorted(dfa.reachable_from(dfa.initial))
    mapping = {old: new for new, old in enumerate(reachable)}

    newdfa = DFA(mapping[dfa.initial])
    for _ in reachable:
        newdfa.new_state()
    for old in reachable:
        for label, dest in zip(ALPHABET, dfa.successors(old)):
            if dest is not None:
                newdfa.add_transition(mapping[old], label, mapping[dest])
        if dfa.is_final(old):
            newdfa.add_final_state(mapping[old])
    if dfa.trap is not None and dfa.trap in mapping:
        newdfa.trap = mapping[dfa.trap]

    if len(newdfa) < len(dfa):
        logger.debug("Pruned {} unreachable states", len(dfa) - len(newdfa))
    return newdfa


def _label_key(label):
    # Sorts alphabet symbols in order, with EPSILON first
    return "" if label is EPSILON else label
