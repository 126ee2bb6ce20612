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

from dataclasses import dataclass

from loguru import logger

from binregex.automata.fsa import ALPHABET, EPSILON, NFA

UNION = "+"
STAR = "*"
OPEN = "("
CLOSE = ")"


class RegexSyntaxError(ValueError):
    """
    Raised when a pattern is not a well-formed binary regular expression.

    Attributes:
        pattern (str): The pattern that failed to parse.
        pos (int): The offset of the offending character, or the length of
            the pattern if the input ended too early.
    """

    def __init__(self, msg, pattern, pos):
        self.msg = msg
        self.pattern = pattern
        self.pos = pos
        super().__init__(f"{msg} at position {pos} in {pattern!r}")


# Syntax tree


class Node:
    pass


@dataclass(frozen=True)
class Literal(Node):
    symbol: str


@dataclass(frozen=True)
class Concat(Node):
    left: Node
    right: Node


@dataclass(frozen=True)
class Union(Node):
    left: Node
    right: Node


@dataclass(frozen=True)
class Star(Node):
    operand: Node


# Parser


class _Group:
    # One open nesting level: the finished union arms and the concatenation
    # currently being extended
    __slots__ = ("arms", "seq")

    def __init__(self):
        self.arms = []
        self.seq = None

    def add(self, node):
        self.seq = node if self.seq is None else Concat(self.seq, node)

    def close(self):
        node = None
        for arm in self.arms + [self.seq]:
            node = arm if node is None else Union(node, arm)
        return node


class Parser:
    """
    Parser for binary regular expressions.

    Every character is its own token::

        union  := concat ('+' concat)*
        concat := star star*          # juxtaposition
        star   := base '*'*
        base   := '0' | '1' | '(' union ')'

    A concatenation continues at any position that is not the end of the
    input, a ``)`` or a ``+``. Concatenation and union associate to the
    left. Anything that does not fit the grammar raises
    :class:`RegexSyntaxError`.

    Open groups are kept on an explicit stack rather than the call stack, so
    neither long patterns nor deep nesting are limited by Python's recursion
    limit.
    """

    def __init__(self, pattern):
        self.pattern = pattern
        self.pos = 0

    def parse(self):
        """
        Parses the whole pattern.

        Returns:
            Node: The root of the syntax tree, or None for the empty pattern
            (which denotes the empty language).
        """
        if not self.pattern:
            return None

        groups = [_Group()]
        while not self._eof():
            char = self.pattern[self.pos]
            group = groups[-1]
            if char in ALPHABET:
                self.pos += 1
                group.add(self._parse_stars(Literal(char)))
            elif char == OPEN:
                self.pos += 1
                groups.append(_Group())
            elif char == CLOSE:
                if group.seq is None:
                    self._fail(f"Missing operand before {char!r}")
                if len(groups) == 1:
                    self._fail("Unbalanced parenthesis")
                groups.pop()
                self.pos += 1
                groups[-1].add(self._parse_stars(group.close()))
            elif char == UNION:
                if group.seq is None:
                    self._fail(f"Missing operand before {char!r}")
                group.arms.append(group.seq)
                group.seq = None
                self.pos += 1
            elif char == STAR:
                # Stars directly after an operand are consumed with it
                self._fail(f"Missing operand before {char!r}")
            else:
                self._fail(f"Unexpected character {char!r}")

        group = groups[-1]
        if group.seq is None:
            self._fail("Unexpected end of pattern")
        if len(groups) > 1:
            self._fail("Expected ')'")
        return group.close()

    def _eof(self):
        return self.pos >= len(self.pattern)

    def _peek(self):
        if self._eof():
            return None
        return self.pattern[self.pos]

    def _fail(self, msg):
        raise RegexSyntaxError(msg, self.pattern, self.pos)

    def _parse_stars(self, node):
        while self._peek() == STAR:
            self.pos += 1
            node = Star(node)
        return node


def parse(pattern):
    """
    Parses a binary regular expression and returns its syntax tree.

    Args:
        pattern (str): A pattern over ``0`` and ``1`` using juxtaposition,
            ``+``, postfix ``*`` and parentheses.

    Returns:
        Node: The syntax tree, or None for the empty pattern.

    Raises:
        RegexSyntaxError: If the pattern is malformed.

    Example:
        >>> parse("0+1*")
        Union(left=Literal(symbol='0'), right=Star(operand=Literal(symbol='1')))
    """
    return Parser(pattern).parse()


# Thompson construction


class RegexBuilder:
    """
    Builds an epsilon NFA from a syntax tree with Thompson's construction.

    All fragments share one growing :class:`NFA`. Each method returns the
    (entry, exit) states of the fragment it built. Only the exit of the
    whole tree is marked final, by :meth:`build`.

    Usage:
        nfa = RegexBuilder().build(parse("01*"))
    """

    def __init__(self):
        self.nfa = NFA(0)

    def new_state(self):
        return self.nfa.new_state()

    def build(self, tree):
        """
        Builds the epsilon NFA for a syntax tree.

        Args:
            tree (Node): The syntax tree, or None for the empty language.

        Returns:
            NFA: The epsilon NFA.
        """
        nfa = self.nfa
        if tree is None:
            nfa.initial = self.new_state()
            return nfa

        s, e = self.fragment(tree)
        nfa.initial = s
        nfa.add_final_state(e)
        logger.debug("Built epsilon NFA with {} states", len(nfa))
        return nfa

    def fragment(self, root):
        """
        Builds the fragment for a whole tree and returns its (entry, exit)
        states.

        The tree is walked in post-order with an explicit stack, so a long
        chain of concatenations does not exhaust the call stack. States are
        allocated in the same order as a recursive walk: a union or star
        allocates its entry and exit before its operands, and the left
        operand is built before the right one.
        """
        frags = []
        # Items are (node, None) before the operands are built, and
        # (node, states) once they are queued
        stack = [(root, None)]
        while stack:
            node, states = stack.pop()
            if states is not None:
                frags.append(self._combine(node, states, frags))
            elif isinstance(node, Literal):
                frags.append(self.char(node.symbol))
            elif isinstance(node, Concat):
                stack.append((node, ()))
                stack.append((node.right, None))
                stack.append((node.left, None))
            elif isinstance(node, Union):
                stack.append((node, (self.new_state(), self.new_state())))
                stack.append((node.right, None))
                stack.append((node.left, None))
            elif isinstance(node, Star):
                stack.append((node, (self.new_state(), self.new_state())))
                stack.append((node.operand, None))
            else:
                raise TypeError(f"Not a syntax tree node: {node!r}")

        assert len(frags) == 1
        return frags[0]

    def _combine(self, node, states, frags):
        if isinstance(node, Concat):
            right = frags.pop()
            left = frags.pop()
            return self.concat(left, right)
        elif isinstance(node, Union):
            right = frags.pop()
            left = frags.pop()
            return self.choice(states, left, right)
        return self.star(states, frags.pop())

    def char(self, label):
        """
        s --label--> e
        """
        s = self.new_state()
        e = self.new_state()
        self.nfa.add_transition(s, label, e)
        return s, e

    def concat(self, left, right):
        """
        left --eps--> right
        """
        s1, e1 = left
        s2, e2 = right
        self.nfa.add_transition(e1, EPSILON, s2)
        return s1, e2

    def choice(self, states, left, right):
        r"""
        ::

              -> left --
             /          \
            s            e
             \          /
              -> right -
        """
        nfa = self.nfa
        s, e = states
        s1, e1 = left
        s2, e2 = right
        nfa.add_transition(s, EPSILON, s1)
        nfa.add_transition(s, EPSILON, s2)
        nfa.add_transition(e1, EPSILON, e)
        nfa.add_transition(e2, EPSILON, e)
        return s, e

    def star(self, states, operand):
        r"""
        ::

                 ---<---
                /       \
            s -> operand -> e
             \             /
              ------>------
        """
        nfa = self.nfa
        s, e = states
        s1, e1 = operand
        nfa.add_transition(s, EPSILON, s1)
        nfa.add_transition(e1, EPSILON, e)
        nfa.add_transition(s, EPSILON, e)
        nfa.add_transition(e1, EPSILON, s1)
        return s, e


def build_nfa(tree):
    """
    Returns the Thompson epsilon NFA for a syntax tree (or None).
    """
    return RegexBuilder().build(tree)


def regex_nfa(pattern):
    """
    Parses a pattern and returns its Thompson epsilon NFA.

    Raises:
        RegexSyntaxError: If the pattern is malformed.
    """
    return build_nfa(parse(pattern))
