"""Tests for the dispatcher.list reply parser."""

import pytest

from kamailio_exporter.parsers.dispatcher import DispatcherTarget, parse_dispatcher_targets
from kamailio_exporter.utils.errors import StructureError

from conftest import double, int_, str_, struct


def dest(uri, flags="AP", priority=0, attrs=None, latency=None):
    props = [("URI", str_(uri)), ("FLAGS", str_(flags)), ("PRIORITY", int_(priority))]
    if attrs is not None:
        props.append(("ATTRS", attrs))
    if latency is not None:
        props.append(("LATENCY", latency))
    return ("DEST", struct(*props))


def dispatcher_set(set_id, *destinations):
    return ("SET", struct(("ID", int_(set_id)), ("TARGETS", struct(*destinations))))


def reply(*sets):
    return [struct(("RECORDS", struct(*sets)))]


def test_flattens_every_set():
    records = reply(
        dispatcher_set(1, dest("sip:10.0.0.1:5060"), dest("sip:10.0.0.2:5060")),
        dispatcher_set(2, dest("sip:10.0.0.3:5060")),
        dispatcher_set(3),
    )

    targets = parse_dispatcher_targets(records)

    assert [(t.set_id, t.uri) for t in targets] == [
        (1, "sip:10.0.0.1:5060"),
        (1, "sip:10.0.0.2:5060"),
        (2, "sip:10.0.0.3:5060"),
    ]


def test_attributes_and_latency_are_filled():
    attrs = struct(
        ("BODY", str_("weight=50;rweight=20")),
        ("WEIGHT", int_(50)),
        ("RWEIGHT", int_(20)),
        ("SOCKET", str_("udp:10.0.0.10:5060")),
    )
    latency = struct(
        ("AVG", double(12.5)),
        ("STD", double(1.25)),
        ("EST", double(11.0)),
        ("MAX", double(40.0)),
        ("TIMEOUT", double(2.0)),
    )
    records = reply(dispatcher_set(7, dest("sip:gw", priority=8, attrs=attrs, latency=latency)))

    target = parse_dispatcher_targets(records)[0]

    assert target == DispatcherTarget(
        set_id=7,
        uri="sip:gw",
        flags="AP",
        priority=8,
        body="weight=50;rweight=20",
        weight=50,
        rweight=20,
        socket="udp:10.0.0.10:5060",
        latency_avg=12.5,
        latency_std=1.25,
        latency_est=11.0,
        latency_max=40.0,
        latency_timeout=2.0,
    )


@pytest.mark.parametrize("flags, status", [("AP", 1), ("IP", 0), ("AX", 0), ("", 0)])
def test_status_follows_flags(flags, status):
    target = parse_dispatcher_targets(reply(dispatcher_set(1, dest("sip:a", flags=flags))))[0]
    assert target.status == status


def test_missing_set_id_fails():
    records = [struct(("RECORDS", struct(("SET", struct(("TARGETS", struct(dest("sip:a"))))))))]

    with pytest.raises(StructureError, match="missing set ID"):
        parse_dispatcher_targets(records)


def test_explicit_zero_set_id_is_accepted():
    target = parse_dispatcher_targets(reply(dispatcher_set(0, dest("sip:a"))))[0]
    assert target.set_id == 0


def test_structural_key_with_wrong_type_fails():
    records = [struct(("RECORDS", struct(("SET", struct(("ID", str_("1"))),))))]
    with pytest.raises(StructureError):
        parse_dispatcher_targets(records)

    records = [struct(("RECORDS", str_("none")))]
    with pytest.raises(StructureError):
        parse_dispatcher_targets(records)


def test_mistyped_leaf_values_degrade_to_zero():
    attrs = struct(("WEIGHT", str_("heavy")), ("SOCKET", int_(1)))
    latency = struct(("AVG", str_("slow")), ("MAX", double(3.0)))

    target = parse_dispatcher_targets(reply(dispatcher_set(1, dest("sip:a", attrs=attrs, latency=latency))))[0]

    assert target.weight == 0
    assert target.socket == ""
    assert target.latency_avg == 0.0
    assert target.latency_max == 3.0


def test_unknown_keys_and_scalar_records_are_ignored():
    records = [
        int_(1),
        struct(
            ("VERSION", str_("5.7")),
            ("RECORDS", struct(
                ("NOTE", str_("ignored")),
                dispatcher_set(4, dest("sip:a"), ("EXTRA", int_(1))),
            )),
        ),
    ]

    targets = parse_dispatcher_targets(records)

    assert [(t.set_id, t.uri) for t in targets] == [(4, "sip:a")]
