#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Symbol & base-address store shared by one assembly run
"""

import logging
from typing import Dict, List, Optional, Tuple
from .utils import (
    SevereError, DuplicateLabel, DuplicateMacro, UnscopedChildLabel, assert_
)

log = logging.getLogger(__name__)


class SymbolStore:
    """
    Labels, user macros, the base address register and the output words.

    Label addresses are byte addresses (instruction index * 4). Child labels
    are keyed by the global label that was current when they were declared.
    """

    def __init__(self):
        self.global_labels: Dict[str, int] = {}                 # name -> address
        self.child_labels: Dict[Tuple[str, str], int] = {}      # (owner, .name) -> address
        self.user_macros: Dict[str, str] = {}                   # name -> replacement text
        self.current_label = ''
        self.base = 0x0000
        self.words: List[int] = []

    def add_global_label(self, name: str, addr: int) -> None:
        """Add a global label and make it the scope for child labels"""
        assert_(name not in self.global_labels,
                f"Label '{name}' already exists", DuplicateLabel)
        self.global_labels[name] = addr
        self.current_label = name
        log.debug("label %s = 0x%x", name, addr)

    def add_child_label(self, name: str, addr: int) -> None:
        """Add a child label under the current global label"""
        assert_(self.current_label != '',
                f"Child label '{name}' declared without a preceding global label",
                UnscopedChildLabel)
        key = (self.current_label, name)
        assert_(key not in self.child_labels,
                f"Label '{self.current_label}{name}' already exists", DuplicateLabel)
        self.child_labels[key] = addr
        log.debug("label %s%s = 0x%x", self.current_label, name, addr)

    def enter_scope(self, name: str) -> None:
        """Re-enter the scope of an already declared global label"""
        self.current_label = name

    def try_get_label(self, name: str) -> Optional[int]:
        """Get label address by name, None if unknown"""
        if not name:
            return None
        if name[0] == '.':
            if not self.current_label:
                return None
            return self.child_labels.get((self.current_label, name))
        return self.global_labels.get(name)

    def add_user_macro(self, name: str, value: str) -> None:
        assert_(name not in self.user_macros,
                f"Macro '{name}' already defined", DuplicateMacro)
        self.user_macros[name] = value
        log.debug("define %s = %r", name, value)

    def get_user_macro(self, name: str) -> Optional[str]:
        return self.user_macros.get(name)

    def set_base(self, value: int) -> None:
        self.base = value & 0xFFFF

    def add_word(self, word: int) -> None:
        if not 0 <= word <= 0xFFFFFFFF:
            raise SevereError(f"Machine word out of range: {word:#x}")
        self.words.append(word)

    @property
    def data_count(self) -> int:
        """Current output size in bytes, i.e. the address of the next word"""
        return len(self.words) * 4
