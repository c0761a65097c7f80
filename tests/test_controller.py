import pytest

from barviz.bar_layout import BarRect
from barviz.controller import ControllerState, VisualizerController, decibels_to_amplitude
from barviz.scheduler import ManualScheduler


def make_controller(**overrides):
    values = dict(width=100, height=100, bar_width=10, bar_spacing=4, scheduler=ManualScheduler())
    values.update(overrides)
    return VisualizerController(**values)


def test_decibels_to_amplitude():
    assert decibels_to_amplitude(0) == 1.0
    assert decibels_to_amplitude(-20) == pytest.approx(0.1)
    assert decibels_to_amplitude(-40) == pytest.approx(0.01)


def test_starts_idle_with_flat_bars():
    controller = make_controller()
    assert controller.state is ControllerState.IDLE
    assert controller.bar_count == 7
    assert all(rect.height == 0 for rect in controller.frame().rects)


def test_add_value_arms_timer_once():
    controller = make_controller()
    controller.add_value(-6)
    controller.add_value(-3)
    assert controller.state is ControllerState.DECAYING
    assert controller.scheduler.pending == 1
    assert controller.newest_value == pytest.approx(decibels_to_amplitude(-3))


def test_zero_db_tick_gives_full_height_center_bar():
    controller = make_controller()
    controller.add_value(0)
    controller.scheduler.advance(controller.decay_speed)

    assert controller.history.values == [1.0]
    center = controller.frame().rects[0]
    assert center == BarRect(45.0, 0.0, 10.0, 100.0)


def test_newest_value_decays_geometrically():
    controller = make_controller()
    controller.add_value(-20)
    for k in range(1, 6):
        controller.tick()
        assert controller.newest_value == pytest.approx(0.1 * 0.8**k)


def test_tick_spreads_history_outwards_symmetrically():
    controller = make_controller()
    controller.add_value(0)
    for _ in range(3):
        controller.tick()

    rects = controller.frame().rects
    history = controller.history.values
    assert history == pytest.approx([0.64, 0.8, 1.0])
    # Slots 1/2 hold positions -1/+1, slots 3/4 hold -2/+2
    assert rects[1].height == rects[2].height
    assert rects[3].height == rects[4].height
    assert rects[1].x < rects[0].x < rects[2].x
    assert rects[5].height == 0


def test_history_is_trimmed_to_bar_count():
    controller = make_controller()
    controller.add_value(0)
    for _ in range(20):
        controller.tick()
    assert len(controller.history) <= (controller.bar_count + 1) // 2


def test_ticking_stops_once_energy_is_gone():
    controller = make_controller()
    controller.add_value(-20)
    controller.scheduler.advance(10.0)
    assert controller.state is ControllerState.IDLE
    assert controller.history.total_energy() <= 1e-6
    assert controller.scheduler.pending == 0


def test_zero_decay_amount_still_terminates():
    controller = make_controller(decay_amount=0.0)
    controller.add_value(0)
    controller.scheduler.advance(1.0)
    assert controller.state is ControllerState.IDLE


def test_add_value_after_idle_restarts_ticks():
    controller = make_controller()
    controller.add_value(-10)
    controller.scheduler.advance(10.0)
    assert controller.state is ControllerState.IDLE
    controller.add_value(-10)
    assert controller.state is ControllerState.DECAYING


def test_decay_speed_change_cancels_until_next_value():
    controller = make_controller()
    controller.add_value(0)
    controller.set_decay_speed(0.05)
    assert controller.state is ControllerState.IDLE
    assert controller.scheduler.pending == 0

    controller.add_value(0)
    ticks = []
    controller.subscribe(ticks.append)
    controller.scheduler.advance(0.1)
    assert len(ticks) == 2


def test_decay_amount_applies_on_next_tick():
    controller = make_controller()
    controller.add_value(0)
    controller.tick()
    controller.set_decay_amount(0.5)
    controller.tick()
    assert controller.newest_value == pytest.approx(0.8 * 0.5)


def test_geometry_change_rebuilds_with_retained_history():
    controller = make_controller(width=300)
    controller.add_value(0)
    for _ in range(5):
        controller.tick()
    before = controller.history.values

    controller.set_bar_width(20)
    assert controller.bar_count == 13
    assert controller.history.values == before
    assert controller.frame().rects[0].width == 20
    assert controller.frame().rects[0].height == pytest.approx(before[0] * 300)

    controller.set_bar_spacing(40)
    assert controller.bar_count == 5
    assert controller.history.values == before[:3]


def test_corner_radius_setter_rebuilds_frame():
    controller = make_controller()
    assert controller.frame().corner_radius == 3
    controller.set_bar_corner_radius(4)
    assert controller.frame().corner_radius == 4


def test_color_change_only_repaints():
    controller = make_controller()
    controller.add_value(0)
    controller.tick()
    rects = controller.frame().rects
    history = controller.history.values

    frames = []
    controller.subscribe(frames.append)
    controller.set_bar_color((0, 0, 255))

    assert len(frames) == 1
    assert frames[0].color == (0, 0, 255)
    assert frames[0].rects == rects
    assert controller.history.values == history


def test_resize_to_nothing_clears_bars():
    controller = make_controller()
    controller.add_value(0)
    controller.tick()
    controller.resize(0, 100)
    assert controller.bar_count == 0
    assert controller.frame().rects == []

    controller.scheduler.advance(1.0)
    assert controller.state is ControllerState.IDLE


def test_resize_keeps_newest_value():
    controller = make_controller()
    controller.add_value(-20)
    controller.resize(200, 50)
    assert controller.newest_value == pytest.approx(0.1)
    assert controller.bar_count == 15


def test_unsubscribe_stops_notifications():
    controller = make_controller()
    frames = []
    unsubscribe = controller.subscribe(frames.append)
    controller.add_value(0)
    controller.tick()
    unsubscribe()
    controller.tick()
    assert len(frames) == 1


def test_close_releases_timer():
    scheduler = ManualScheduler()
    with make_controller(scheduler=scheduler) as controller:
        controller.add_value(0)
        assert scheduler.pending == 1
    assert controller.state is ControllerState.IDLE
    assert scheduler.pending == 0


@pytest.mark.parametrize("setter, value", [("set_decay_speed", 0), ("set_decay_amount", 1.0), ("set_bar_color", (0, 0))])
def test_invalid_settings_rejected(setter, value):
    controller = make_controller()
    with pytest.raises(ValueError):
        getattr(controller, setter)(value)
