"""Turbofan spool dynamics and fuel burn.

Each engine's N1 chases its target (thrust lever or autothrottle command)
at a limited rate. N2, EGT and fuel flow follow from N1.

Typical usage:
    from aircore.systems.engine.spool import update_engines

    engines = update_engines(n1=[85.0, 85.0], targets=[90.0, 90.0],
                             altitude=35000.0, fuel=20000.0, dt=0.1, rng=rng)
    print(engines.n1, engines.fuel)
"""

import random
from collections.abc import Sequence
from dataclasses import dataclass

SPOOL_RATE = 5.0  # N1 percent per second
TARGET_JITTER = 0.2  # N1 percent
N2_RATIO = 1.12

EGT_BASE = 600.0  # °C
EGT_PER_N1 = 3.0
EGT_REFERENCE_ALTITUDE = 35000.0  # ft
EGT_PER_1000_FT = 10.0
EGT_JITTER = 2.0

FUEL_BURN_PER_N1 = 0.01  # kg/s per percent N1


@dataclass(frozen=True)
class EngineUpdate:
    """Engine parameters after one tick.

    Attributes:
        n1: Fan speed per engine, percent.
        n2: Core speed per engine, percent.
        egt: Exhaust gas temperature per engine, °C.
        fuel_flow: Fuel flow per engine, kg/h.
        fuel: Remaining fuel, kg.
        fuel_burned: Fuel burned this tick, kg.
    """

    n1: tuple[float, ...]
    n2: tuple[float, ...]
    egt: tuple[float, ...]
    fuel_flow: tuple[float, ...]
    fuel: float
    fuel_burned: float


def spool_toward(current: float, target: float, dt: float, rate: float = SPOOL_RATE) -> float:
    """Move N1 toward target by at most rate * dt, clamped to [0, 100].

    Args:
        current: Current N1 in percent.
        target: Target N1 in percent.
        dt: Time step in seconds.
        rate: Maximum spool rate in percent per second.

    Returns:
        New N1.
    """
    diff = target - current
    max_step = rate * dt
    step = max(-max_step, min(max_step, diff))
    return max(0.0, min(100.0, current + step))


def exhaust_gas_temperature(n1: float, altitude: float) -> float:
    """EGT in °C before jitter."""
    altitude_term = EGT_PER_1000_FT * (EGT_REFERENCE_ALTITUDE - altitude) / 1000.0
    return EGT_BASE + EGT_PER_N1 * n1 + altitude_term


def update_engines(
    n1: Sequence[float],
    targets: Sequence[float],
    altitude: float,
    fuel: float,
    dt: float,
    rng: random.Random,
    failed: Sequence[bool] = (),
) -> EngineUpdate:
    """Advance both engines by one tick.

    Args:
        n1: Current N1 per engine.
        targets: Commanded N1 per engine.
        altitude: Feet.
        fuel: Remaining fuel in kg. Engines wind down once it reaches 0.
        dt: Time step in seconds.
        rng: Random source for target and EGT jitter.
        failed: Flameout flag per engine. A failed engine spools down to 0
            and burns no fuel.

    Returns:
        New engine parameters and remaining fuel.
    """
    flamed_out = [bool(flag) for flag in failed] + [False] * (len(n1) - len(failed))

    new_n1 = []
    for current, commanded, out in zip(n1, targets, flamed_out):
        if fuel <= 0 or out:
            target = 0.0
        else:
            target = commanded + rng.uniform(-TARGET_JITTER, TARGET_JITTER)
            target = max(0.0, min(100.0, target))
        new_n1.append(spool_toward(current, target, dt))

    n2 = tuple(N2_RATIO * value for value in new_n1)
    egt = tuple(
        exhaust_gas_temperature(value, altitude) + rng.uniform(-EGT_JITTER, EGT_JITTER)
        for value in new_n1
    )
    running_n1 = [0.0 if out else value for value, out in zip(new_n1, flamed_out)]
    fuel_flow = tuple(FUEL_BURN_PER_N1 * value * 3600.0 for value in running_n1)

    burned = min(max(0.0, fuel), FUEL_BURN_PER_N1 * sum(running_n1) * dt)
    remaining = max(0.0, fuel - burned)

    return EngineUpdate(
        n1=tuple(new_n1),
        n2=n2,
        egt=egt,
        fuel_flow=fuel_flow,
        fuel=remaining,
        fuel_burned=burned,
    )
