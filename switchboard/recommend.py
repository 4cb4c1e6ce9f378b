"""Recommendation engine: which switch to work on next, and in which mode.

derive_recommended_switch walks an ordered ladder; the first matching rule
wins and the order is part of the contract:

1. low energy + high stress  -> mind  (alt body)
2. low energy                -> body  (alt mind)
3. overwhelm or time chaos   -> time  (alt mind)
4. money stress (flag or >=2 recent) -> money (alt time)
5. relationship drain        -> relationships (alt mind)
6. messy environment         -> environment (alt time)
7. fallback                  -> primary or body (alt support or mind)
"""

from __future__ import annotations

from switchboard.models import Level, Mode, Recommendation, Signals, SwitchId

MONEY_STRESS_COUNT_THRESHOLD = 2


def _fallback(signals: Signals) -> Recommendation:
    if signals.primary_switch_id is not None:
        reason = f"Based on your focus, let's train your {signals.primary_switch_id.value} switch."
    else:
        reason = "Energy first. Then everything else."
    return Recommendation(
        signals.primary_switch_id or SwitchId.BODY,
        signals.support_switch_id or SwitchId.MIND,
        reason,
    )


def derive_recommended_switch(signals: Signals) -> Recommendation:
    """Pick the recommended and alternative switch for the current signals."""
    flags = signals.flags

    if signals.energy_level == Level.LOW:
        if signals.stress_level == Level.HIGH:
            return Recommendation(
                SwitchId.MIND,
                SwitchId.BODY,
                "Your mind's overloaded. Let's quiet the noise so you can move.",
            )
        return Recommendation(
            SwitchId.BODY,
            SwitchId.MIND,
            "Your energy is low. Let's charge the battery first.",
        )

    if flags.overwhelm or flags.time_chaos:
        return Recommendation(
            SwitchId.TIME,
            SwitchId.MIND,
            "Structure reduces overwhelm fast. One block changes the whole day.",
        )

    if signals.flag_counts_14d.money_stress >= MONEY_STRESS_COUNT_THRESHOLD or flags.money_stress:
        return Recommendation(
            SwitchId.MONEY,
            SwitchId.TIME,
            "Clarity lowers money stress. We'll take one small control step.",
        )

    if flags.relationship_drain:
        return Recommendation(
            SwitchId.RELATIONSHIPS,
            SwitchId.MIND,
            "A boundary or connection move can stop the drain.",
        )

    if flags.env_mess:
        return Recommendation(
            SwitchId.ENVIRONMENT,
            SwitchId.TIME,
            "Removing friction makes everything easier to start.",
        )

    return _fallback(signals)


def derive_mode(signals: Signals) -> Mode:
    """Behavioral posture to generate content for.

    Mirrors the energy/stress branches of the recommendation ladder.
    """
    if signals.energy_level == Level.LOW or signals.flags.low_energy:
        return Mode.RESTORING
    if signals.stress_level == Level.HIGH or signals.flags.overwhelm:
        return Mode.RESTORING
    return signals.mode_bias or Mode.TRAINING
