import random
import dataclasses
import threading
import uuid

import pytest

from bingo.services.game import (
    ArgumentError,
    CardUnavailable,
    GameStatus,
    PlayerNotFound,
    Session,
    SessionStateError,
)


def _live_fingerprints(session):
    pooled = [c.fingerprint for c in session._card_pool.values()]
    assigned = [p.scorecard.fingerprint for p in session.list_players() if p.scorecard]
    return pooled + assigned


def test_boot_state(session, phrases):
    state = session.snapshot()
    assert state.status == GameStatus.WAITING_FOR_HOST
    assert state.current_call is None
    assert state.called_phrases == ()
    assert state.remaining_calls == len(phrases)
    assert state.player_count == 0
    assert state.winners == ()


def test_empty_phrase_list_rejected():
    with pytest.raises(ArgumentError):
        Session([])


def test_register_and_get_player(session):
    player = session.register_player('  Alice ')
    assert player.display_name == 'Alice'
    assert session.get_player(player.id) is player
    assert session.snapshot().player_count == 1


def test_blank_name_gets_placeholder(session):
    player = session.register_player('   ')
    assert player.display_name == f'Player-{player.id.hex[:4].upper()}'


def test_register_existing_player_is_idempotent(session):
    player = session.register_player('Alice')
    again = session.register_player('Someone else', player.id)
    assert again is player
    assert again.display_name == 'Alice'
    assert session.snapshot().player_count == 1


def test_register_unknown_id_fails(session):
    with pytest.raises(PlayerNotFound):
        session.register_player('Bob', uuid.uuid4())


def test_get_unknown_player_fails(session):
    with pytest.raises(PlayerNotFound):
        session.get_player(uuid.uuid4())


def test_preview_fills_pool_without_reserving(session):
    cards = session.preview_scorecards(3)
    assert len(cards) == 3
    assert len(session._card_pool) == 20
    assert all(c.id in session._card_pool for c in cards)


def test_preview_larger_than_pool_target(session):
    cards = session.preview_scorecards(25)
    assert len(cards) == 25
    assert len({c.id for c in cards}) == 25


def test_preview_count_must_be_positive(session):
    with pytest.raises(ArgumentError):
        session.preview_scorecards(0)


def test_no_duplicate_content_across_preview_and_assign(session):
    players = [session.register_player(f'P{i}') for i in range(5)]
    for round_no in range(4):
        for p in players:
            card = session.preview_scorecards(2)[round_no % 2]
            session.assign_scorecard(p.id, card.id)
            live = _live_fingerprints(session)
            assert len(live) == len(set(live))


def test_pool_refuses_to_spin_when_content_runs_out():
    class _Fixed(random.Random):
        def shuffle(self, x):
            pass

    s = Session([f'K{i}' for i in range(24)], rng=_Fixed())
    s.reset(drop_players=True)
    with pytest.raises(ArgumentError):
        s.preview_scorecards(2)


def test_assign_moves_card_out_of_pool(session):
    player = session.register_player('Ann')
    card = session.preview_scorecards(1)[0]
    updated = session.assign_scorecard(player.id, card.id)
    assert updated.scorecard == card
    assert card.id not in session._card_pool


def test_returned_player_does_not_track_later_changes(session):
    player = session.register_player('Ann')
    card = session.preview_scorecards(1)[0]
    assigned = session.assign_scorecard(player.id, card.id)

    session.reset(drop_players=False)
    assert assigned.scorecard == card
    assert session.get_player(player.id).scorecard is None

    with pytest.raises(dataclasses.FrozenInstanceError):
        assigned.scorecard = None
    with pytest.raises(dataclasses.FrozenInstanceError):
        assigned.display_name = 'Mallory'
    assert session.get_player(player.id).display_name == 'Ann'
    assert session._assigned_fingerprints == set()


def test_assign_taken_card_fails(session):
    a = session.register_player('Ann')
    b = session.register_player('Ben')
    card = session.preview_scorecards(1)[0]
    session.assign_scorecard(a.id, card.id)
    with pytest.raises(CardUnavailable):
        session.assign_scorecard(b.id, card.id)
    assert session.get_player(b.id).scorecard is None


def test_reassign_before_start_releases_old_fingerprint(session):
    player = session.register_player('Ann')
    first, second = session.preview_scorecards(2)
    session.assign_scorecard(player.id, first.id)
    session.assign_scorecard(player.id, second.id)
    assert first.fingerprint not in session._assigned_fingerprints
    assert second.fingerprint in session._assigned_fingerprints


def test_assign_locked_once_round_started_with_card(session):
    player = session.register_player('Ann')
    first, second = session.preview_scorecards(2)
    session.assign_scorecard(player.id, first.id)
    session.start()
    with pytest.raises(SessionStateError):
        session.assign_scorecard(player.id, second.id)
    assert session.get_player(player.id).scorecard == first


def test_assign_allowed_in_progress_without_card(session):
    session.start()
    player = session.register_player('Late')
    card = session.preview_scorecards(1)[0]
    assert session.assign_scorecard(player.id, card.id).scorecard == card


def test_concurrent_assignment_has_one_winner(session):
    players = [session.register_player(f'P{i}') for i in range(8)]
    card = session.preview_scorecards(1)[0]
    results = []
    barrier = threading.Barrier(len(players))

    def pick(pid):
        barrier.wait()
        try:
            session.assign_scorecard(pid, card.id)
            results.append('ok')
        except CardUnavailable:
            results.append('taken')

    threads = [threading.Thread(target=pick, args=(p.id,)) for p in players]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert results.count('ok') == 1
    assert results.count('taken') == len(players) - 1


def test_draw_before_start_fails(session):
    with pytest.raises(SessionStateError):
        session.draw_next()


def test_draws_every_phrase_once_then_completes(session, phrases):
    session.start()
    drawn = []
    for i in range(len(phrases)):
        state = session.draw_next()
        drawn.append(state.current_call)
        if i < len(phrases) - 1:
            assert state.status == GameStatus.IN_PROGRESS
    assert state.status == GameStatus.COMPLETE
    assert session.snapshot().remaining_calls == 0
    assert sorted(drawn) == sorted(phrases)
    assert list(state.called_phrases) == drawn

    again = session.draw_next()
    assert again.status == GameStatus.COMPLETE
    assert again.remaining_calls == 0
    assert again.called_phrases == state.called_phrases


def test_start_is_idempotent_while_running(session):
    first = session.start()
    session.draw_next()
    again = session.start()
    assert again.status == GameStatus.IN_PROGRESS
    assert len(again.called_phrases) == 1
    assert again.started_at == first.started_at


def test_start_after_complete_refills_empty_queue(session, phrases):
    session.start()
    for _ in phrases:
        session.draw_next()
    restarted = session.start()
    assert restarted.status == GameStatus.IN_PROGRESS
    assert restarted.remaining_calls == len(phrases)
    assert restarted.called_phrases == ()
    assert restarted.current_call is None


def test_reset_keeps_players_but_clears_cards(session, phrases):
    players = [session.register_player(n) for n in ('Ann', 'Ben')]
    for p in players:
        card = session.preview_scorecards(1)[0]
        session.assign_scorecard(p.id, card.id)
    session.start()
    session.draw_next()

    state = session.reset(drop_players=False)
    assert state.status == GameStatus.WAITING_FOR_HOST
    assert state.player_count == 2
    assert state.called_phrases == ()
    assert state.current_call is None
    assert state.started_at is None
    assert state.remaining_calls == len(phrases)
    assert all(p.scorecard is None for p in session.list_players())
    assert session._card_pool == {}
    assert session._assigned_fingerprints == set()

    assert len(session.preview_scorecards(1)) == 1
    assert len(session._card_pool) == 20


def test_reset_can_drop_players(session):
    player = session.register_player('Ann')
    state = session.reset(drop_players=True)
    assert state.player_count == 0
    with pytest.raises(PlayerNotFound):
        session.get_player(player.id)


def test_restore_player_tracks_card_fingerprint(session):
    card = session.preview_scorecards(1)[0]
    pid = uuid.uuid4()
    player = session.restore_player(pid, 'Returning', scorecard=card)
    assert player.scorecard == card
    assert card.id not in session._card_pool
    assert card.fingerprint in session._assigned_fingerprints
    assert session.restore_player(pid, 'Other name') is player


def test_restore_player_drops_card_already_live(session):
    card = session.preview_scorecards(1)[0]
    owner = session.register_player('Owner')
    session.assign_scorecard(owner.id, card.id)
    player = session.restore_player(uuid.uuid4(), 'Copycat', scorecard=card)
    assert player.scorecard is None


def test_restore_player_without_name_is_a_state_error(session):
    with pytest.raises(SessionStateError):
        session.restore_player(uuid.uuid4(), '  ')


def test_snapshot_is_a_copy(session):
    session.start()
    before = session.snapshot()
    session.draw_next()
    assert before.called_phrases == ()
    assert before.current_call is None


def test_closed_session_refuses_work(session):
    session.close()
    session.close()
    with pytest.raises(SessionStateError):
        session.snapshot()
