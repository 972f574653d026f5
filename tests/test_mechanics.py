import pytest
from transitions.core import MachineError

from mechanics import Arm, Platter, forward_arc, new_lifecycle_machine, shortest_arc
from models import Request, State


class TestPlatter:
    @pytest.mark.parametrize("speed", [1, 7, 0.3, 359, 725])
    def test_angle_stays_in_range(self, speed):
        p = Platter(rotate_speed=speed)
        for _ in range(2000):
            p.advance()
            assert 0.0 <= p.angle < 360.0

    def test_radially_close_across_wrap(self):
        p = Platter(rotate_speed=1, angle=359.5)
        assert p.radially_close(0.0)
        assert p.radially_close(359.0)
        assert not p.radially_close(357.0)

    def test_tolerance_is_one_tick_plus_epsilon(self):
        p = Platter(rotate_speed=2, epsilon=0.0001, angle=10.0)
        assert p.radially_close(12.0)
        assert not p.radially_close(12.5)

    def test_arcs(self):
        assert forward_arc(350.0, 10.0) == 20.0
        assert forward_arc(10.0, 350.0) == 340.0
        assert forward_arc(-15.0, 0.0) == 15.0
        assert shortest_arc(350.0, 10.0) == 20.0


class TestArm:
    def test_inward_seek_takes_width_over_speed_ticks(self):
        arm = Arm(track=0, x1=120.0, width=40.0, speed_base=1.0)
        arm.plan(1, 80.0)
        assert arm.speed == -1.0
        ticks = 1
        while not arm.step():
            ticks += 1
        assert ticks == 40
        assert arm.x1 == 80.0 and arm.x2 == 120.0
        assert arm.track == 1
        assert not arm.seeking

    def test_outward_seek(self):
        arm = Arm(track=2, x1=40.0, width=40.0, speed_base=2.0)
        arm.plan(0, 120.0)
        assert arm.speed == 2.0
        steps = 1
        while not arm.step():
            steps += 1
        assert steps == 40
        assert arm.x1 == 120.0 and arm.track == 0

    def test_overshoot_snaps_exactly(self):
        arm = Arm(track=0, x1=120.0, width=40.0, speed_base=3.0)
        arm.plan(1, 80.0)
        while not arm.step():
            pass
        assert arm.x1 == 80.0

    def test_fractional_speed_has_no_drift(self):
        arm = Arm(track=0, x1=120.0, width=40.0, speed_base=0.1)
        arm.plan(2, 40.0)
        while not arm.step():
            pass
        arm.plan(0, 120.0)
        while not arm.step():
            pass
        assert arm.x1 == 120.0


class TestLifecycle:
    def _req(self, machine, block=3, index=0):
        r = Request(block=block, index=index)
        machine.add_model(r)
        return r

    def test_forward_path_stamps_ticks(self):
        m = new_lifecycle_machine()
        r = self._req(m)
        assert r.state is State.NULL
        r.seek(tick=0); r.rotate(tick=40); r.transfer(tick=100); r.complete(tick=130)
        assert r.state is State.DONE
        assert (r.seek_begin, r.rotate_begin, r.transfer_begin, r.done_at) == (0, 40, 100, 130)
        assert [s for s, _ in r.history] == [State.SEEKING, State.ROTATING, State.TRANSFERRING, State.DONE]
        s = r.to_stats()
        assert (s.seek, s.rotate, s.transfer, s.total) == (40, 60, 30, 130)

    def test_cannot_go_backwards_or_skip(self):
        m = new_lifecycle_machine()
        r = self._req(m)
        with pytest.raises(MachineError):
            r.rotate(tick=0)
        r.seek(tick=0)
        with pytest.raises(MachineError):
            r.seek(tick=1)
        with pytest.raises(MachineError):
            r.complete(tick=1)
        assert r.state is State.SEEKING

    def test_done_is_terminal(self):
        m = new_lifecycle_machine()
        r = self._req(m)
        r.seek(tick=0); r.rotate(tick=0); r.transfer(tick=0); r.complete(tick=1)
        for trig in (r.seek, r.rotate, r.transfer, r.complete):
            with pytest.raises(MachineError):
                trig(tick=2)

    def test_no_shortcut_triggers(self):
        m = new_lifecycle_machine()
        r = self._req(m)
        assert not hasattr(r, "to_DONE")

    def test_requests_share_one_machine(self):
        m = new_lifecycle_machine()
        a = self._req(m, block=1, index=0)
        b = self._req(m, block=1, index=1)
        a.seek(tick=0)
        assert a.state is State.SEEKING
        assert b.state is State.NULL
