"""
Firenotes — Screen Navigation
==============================

What:  The four screens and a back stack with "pop up to" semantics.
Why:   Successful login must not leave Login underneath Home (back would
       return to a stale login form), and logout must not leave Home
       reachable. The route handlers report the resulting destination and
       stack to the UI.

Transitions:
    Login          → Home            pop up to Login (inclusive)
    Login          → Sign-Up / Forgot-Password
    Sign-Up        → Home | Login
    Home           → Login           pop up to Home (inclusive)
    Forgot-Password→ Login           pop up to Login (inclusive)
"""

from enum import Enum
from typing import List, Optional


class Destination(str, Enum):
    LOGIN = "login"
    SIGN_UP = "sign_up"
    HOME = "home"
    FORGOT_PASSWORD = "forgot_password"


START_DESTINATION = Destination.LOGIN


class Navigator:
    """Stack of destinations; the last entry is the visible screen."""

    def __init__(self, stack: Optional[List[Destination]] = None):
        self._stack: List[Destination] = list(stack) if stack else [START_DESTINATION]

    @property
    def current(self) -> Destination:
        return self._stack[-1]

    @property
    def back_stack(self) -> List[Destination]:
        return list(self._stack)

    def navigate(
        self,
        destination: Destination,
        pop_up_to: Optional[Destination] = None,
        inclusive: bool = False,
    ) -> Destination:
        """
        Push `destination`, first popping entries above the most recent
        `pop_up_to` (and that entry too when `inclusive`). An absent
        `pop_up_to` destination leaves the stack untouched.
        """
        if pop_up_to is not None and pop_up_to in self._stack:
            index = len(self._stack) - 1 - self._stack[::-1].index(pop_up_to)
            del self._stack[index if inclusive else index + 1:]
        self._stack.append(destination)
        return destination

    def pop(self) -> Optional[Destination]:
        """Go back one screen; the root screen cannot be popped."""
        if len(self._stack) <= 1:
            return None
        self._stack.pop()
        return self.current
