# Copyright 2014 Matt Chaput. All rights reserved.
#
# Redistribution and use in source and binary forms, with or without
# modification, are permitted provided that the following conditions are met:
#
#    1. Redistributions of source code must retain the above copyright notice,
#       this list of conditions and the following disclaimer.
#
#    2. Redistributions in binary form must reproduce the above copyright
#       notice, this list of conditions and the following disclaimer in the
#       documentation and/or other materials provided with the distribution.
#
# THIS SOFTWARE IS PROVIDED BY MATT CHAPUT ``AS IS'' AND ANY EXPRESS OR
# IMPLIED WARRANTIES, INCLUDING, BUT NOT LIMITED TO, THE IMPLIED WARRANTIES OF
# MERCHANTABILITY AND FITNESS FOR A PARTICULAR PURPOSE ARE DISCLAIMED. IN NO
# EVENT SHALL MATT CHAPUT OR CONTRIBUTORS BE LIABLE FOR ANY DIRECT, INDIRECT,
# INCIDENTAL, SPECIAL, EXEMPLARY, OR CONSEQUENTIAL DAMAGES (INCLUDING, BUT NOT
# LIMITED TO, PROCUREMENT OF SUBSTITUTE GOODS OR SERVICES; LOSS OF USE, DATA,
# OR PROFITS; OR BUSINESS INTERRUPTION) HOWEVER CAUSED AND ON ANY THEORY OF
# LIABILITY, WHETHER IN CONTRACT, STRICT LIABILITY, OR TORT (INCLUDING
# NEGLIGENCE OR OTHERWISE) ARISING IN ANY WAY OUT OF THE USE OF THIS SOFTWARE,
# EVEN IF ADVISED OF THE POSSIBILITY OF SUCH DAMAGE.
#
# The views and conclusions contained in the software and documentation are
# those of the authors and should not be interpreted as representing official
# policies, either expressed or implied, of Matt Chaput.

"""
Canonical naming, transition tables and right-linear grammars for DFAs.
"""

from collections import deque

from binregex.automata.fsa import ALPHABET

HEADER = "      " + " ".join(ALPHABET)


def name_states(dfa, prefix="q"):
    """
    Names the states reachable from the initial state.

    States are visited breadth-first from the initial state, following the
    ``0`` transition before the ``1`` transition, and are labelled
    ``q0, q1, ...`` in the order they are discovered. States that are never
    reached get no label.

    Args:
        dfa (DFA): The automaton to name.
        prefix (str, optional): The label prefix. Defaults to "q".

    Returns:
        dict: Maps each reached state to its label, in label order.
    """
    names = {dfa.initial: f"{prefix}0"}
    queue = deque([dfa.initial])
    while queue:
        state = queue.popleft()
        for dest in dfa.successors(state):
            if dest is not None and dest not in names:
                names[dest] = f"{prefix}{len(names)}"
                queue.append(dest)
    return names


def transition_table(
    dfa, names, start_marker="(s)", accept_marker="(e)", missing="N"
):
    """
    Renders the DFA as a table, one line per named state in label order.

    Each row is the optional start marker, the optional accept marker, the
    state's label, and the labels of its ``0`` and ``1`` successors, with
    ``missing`` standing in for "no transition".

    Returns:
        list: The lines of the table, starting with the column header.
    """
    lines = [HEADER]
    for state, label in names.items():
        mark = ""
        if state == dfa.initial:
            mark += start_marker
        if dfa.is_final(state):
            mark += accept_marker
        cells = [names.get(dest, missing) for dest in dfa.successors(state)]
        lines.append(f"{mark}{label} " + " ".join(cells))
    return lines


def productions(dfa, names):
    """
    Yields the productions of a right-linear grammar equivalent to the DFA.

    For a state ``X`` with a named ``c`` successor ``Y``, ``X->cY`` is
    produced unless ``Y`` is accepting with no moves of its own, and
    ``X->c`` is produced whenever ``Y`` is accepting. All of a state's
    ``X->cY`` productions come before its ``X->c`` productions, and states
    come in label order.

    Args:
        dfa (DFA): The automaton, normally minimized and without its trap.
        names (dict): The labels from :func:`name_states`.
    """
    for state, lhs in names.items():
        terminals = []
        for label, dest in zip(ALPHABET, dfa.successors(state)):
            if dest not in names:
                continue

            final = dfa.is_final(dest)
            if not (final and dfa.is_sink(dest)):
                yield f"{lhs}->{label}{names[dest]}"
            if final:
                terminals.append(f"{lhs}->{label}")
        yield from terminals


def report(dfa, names=None, prefix="q", **kwargs):
    """
    Returns the full text report for a DFA: the transition table, a blank
    line and the grammar productions, each line terminated by a newline.

    Extra keyword arguments are passed to :func:`transition_table`.
    """
    if names is None:
        names = name_states(dfa, prefix=prefix)
    lines = transition_table(dfa, names, **kwargs)
    lines.append("")
    lines.extend(productions(dfa, names))
    return "".join(line + "\n" for line in lines)
