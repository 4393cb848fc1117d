import logging
from collections import namedtuple
from typing import List

from buzzer.errors import InvalidName, InvalidTransition, RoomNotFound, Unauthorized
from buzzer.models import Player, Room, RoomStatus, sanitize_name


logger = logging.getLogger(__name__)

# A named event with its payload, to be broadcast to everyone in the room
Event = namedtuple('Event', ['name', 'payload'])


def room_update(room: Room) -> Event:
    return Event('roomUpdate', room.to_dict())


def new_player(player_id: str, raw_name, max_length: int = 20) -> Player:
    name = sanitize_name(raw_name, max_length)
    if not name:
        raise InvalidName()
    return Player(player_id, name)


def _require_host(room: Room, requester_id: str) -> None:
    if requester_id != room.host_id:
        raise Unauthorized(f"{requester_id} is not host of {room.code}")


def join(room: Room, player: Player) -> List[Event]:
    """Append ``player`` to the room in join order. Status is untouched."""
    with room.lock:
        # Looked up before the last member left; the room is gone now
        if room.closed:
            raise RoomNotFound()
        room.players.append(player)
        return [room_update(room)]


def start_round(room: Room, requester_id: str) -> List[Event]:
    """Host-only: waiting -> running.

    A start while a round is running or already ended is ignored; the host
    goes through ``next_round`` to get back to waiting.
    """
    with room.lock:
        _require_host(room, requester_id)
        if room.status != RoomStatus.WAITING:
            raise InvalidTransition(f"cannot start round in {room.code} while {room.status}")
        room.status = RoomStatus.RUNNING
        room.winner = None
        return [Event('roundStarted', {}), room_update(room)]


def next_round(room: Room, requester_id: str) -> List[Event]:
    """Host-only reset back to waiting, from any status."""
    with room.lock:
        _require_host(room, requester_id)
        room.status = RoomStatus.WAITING
        room.winner = None
        return [Event('roundReset', {}), room_update(room)]


def press_button(room: Room, player_id: str) -> List[Event]:
    """First press of a running round wins and ends it.

    Every later press in the same round finds the winner already set and
    is rejected, so concurrent presses resolve to exactly one winner.
    """
    with room.lock:
        if room.status != RoomStatus.RUNNING or room.winner:
            raise InvalidTransition(f"press in {room.code} while {room.status}")
        player = room.find_player(player_id)
        if player is None:
            raise InvalidTransition(f"{player_id} is not in {room.code}")
        room.winner = player.name
        room.status = RoomStatus.ENDED
        return [Event('roundEnded', {'winner': room.winner}), room_update(room)]


def leave(room: Room, player_id: str, registry) -> List[Event]:
    """Remove a player, migrating host or deleting the room as needed.

    Returns no events when the room was emptied (nobody is left to tell).
    """
    with room.lock:
        remaining = [p for p in room.players if p.id != player_id]
        if len(remaining) == len(room.players):
            return []
        room.players = remaining

        if not room.players:
            registry.remove_if_empty(room.code)
            return []

        events = []
        if room.host_id == player_id:
            new_host = room.players[0]
            room.host_id = new_host.id
            logger.info(f"[host-change] code={room.code} host={new_host.id}")
            events.append(Event('hostChanged', new_host.to_dict(room.host_id)))
        events.append(room_update(room))
        return events
