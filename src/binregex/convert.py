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
The regex to minimal DFA to grammar pipeline as one object.
"""

from cached_property import cached_property

from binregex.automata import grammar as rg
from binregex.automata.fsa import prune_dfa
from binregex.automata.reg import build_nfa, parse


class Conversion:
    """
    Converts one binary regular expression to its minimal DFA and its
    right-linear grammar.

    Every stage is computed the first time it is accessed and then kept, so
    the intermediate automata can be inspected without repeating work. No
    stage modifies the result of an earlier one.

    Args:
        pattern (str): The regular expression over ``0`` and ``1``.
        prefix (str, optional): The prefix of the state labels. Defaults to
            "q".
        remove_trap (bool, optional): Whether to remove the trap state (and
            any state it leaves unreachable) before naming. Defaults to
            True.

    Example:
        >>> conv = Conversion("0+1")
        >>> conv.grammar()
        ['q0->0', 'q0->1']
    """

    def __init__(self, pattern, prefix="q", remove_trap=True):
        self.pattern = pattern
        self.prefix = prefix
        self.remove_trap = remove_trap

    def __repr__(self):
        return f"{self.__class__.__name__}({self.pattern!r})"

    @cached_property
    def tree(self):
        return parse(self.pattern)

    @cached_property
    def enfa(self):
        return build_nfa(self.tree)

    @cached_property
    def nfa(self):
        return self.enfa.remove_epsilon()

    @cached_property
    def dfa(self):
        return self.nfa.to_dfa()

    @cached_property
    def minimal(self):
        return self.dfa.minimize()

    @cached_property
    def reduced(self):
        """
        The DFA that gets named and printed: the minimal DFA with its trap
        state removed and unreachable states pruned, or the minimal DFA
        itself when ``remove_trap`` is False.
        """
        if not self.remove_trap:
            return self.minimal

        dfa = self.minimal.copy()
        dfa.remove_trap()
        return prune_dfa(dfa)

    @cached_property
    def names(self):
        return rg.name_states(self.reduced, prefix=self.prefix)

    def accept(self, string):
        return self.reduced.accept(string)

    def table(self, **kwargs):
        return rg.transition_table(self.reduced, self.names, **kwargs)

    def grammar(self):
        return list(rg.productions(self.reduced, self.names))

    def report(self, **kwargs):
        return rg.report(self.reduced, self.names, **kwargs)


def convert(pattern, **kwargs):
    """
    Returns the text report for a pattern. Keyword arguments are passed to
    :class:`Conversion`.

    Raises:
        RegexSyntaxError: If the pattern is malformed.
    """
    return Conversion(pattern, **kwargs).report()
