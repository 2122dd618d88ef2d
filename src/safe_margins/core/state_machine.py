# -*- mode: python; coding: utf-8 -*-
#
# Copyright (C) 2025 Benjamin Thomas Schwertfeger
# All rights reserved.
# https://github.com/btschwertfeger
#

import asyncio
from enum import Enum, auto
from logging import getLogger
from typing import Self

LOG = getLogger(__name__)


class States(Enum):
    """Represents the state of the bot"""

    INITIALIZING = auto()
    RUNNING = auto()
    SHUTDOWN_REQUESTED = auto()
    ERROR = auto()


class StateMachine:
    """
    Keeps track of the bot's lifecycle and lets asyncio tasks wait until a
    shutdown was requested or an error occurred.
    """

    def __init__(self: Self, initial_state: States = States.INITIALIZING) -> None:
        self._state: States = initial_state
        self._transitions = {
            States.INITIALIZING: {
                States.RUNNING,
                States.SHUTDOWN_REQUESTED,
                States.ERROR,
            },
            States.RUNNING: {States.ERROR, States.SHUTDOWN_REQUESTED},
            States.ERROR: {States.RUNNING, States.SHUTDOWN_REQUESTED},
            States.SHUTDOWN_REQUESTED: {States.ERROR},
        }
        self._shutdown_event: asyncio.Event | None = None

    @property
    def state(self: Self) -> States:
        return self._state

    def transition_to(self: Self, new_state: States) -> None:
        """Transition to a new state if allowed."""
        if new_state == self._state:
            return

        if new_state not in self._transitions.get(self._state, set()):
            raise ValueError(
                f"Invalid state transition from {self._state} to {new_state}",
            )

        LOG.debug("Transition from %s to %s", self._state.name, new_state.name)
        self._state = new_state

        if new_state in {States.SHUTDOWN_REQUESTED, States.ERROR}:
            self.__get_shutdown_event().set()

    async def wait_for_shutdown(self: Self) -> None:
        """Block until the state is SHUTDOWN_REQUESTED or ERROR."""
        if self._state in {States.SHUTDOWN_REQUESTED, States.ERROR}:
            return
        await self.__get_shutdown_event().wait()

    def __get_shutdown_event(self: Self) -> asyncio.Event:
        # Created lazily so the event belongs to the running loop.
        if self._shutdown_event is None:
            self._shutdown_event = asyncio.Event()
        return self._shutdown_event
