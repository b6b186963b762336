from __future__ import annotations

import itertools

import pytest

from core.combinations import count_jobs, generate_jobs, launch_offset
from core.templates import parse_field_templates

TARGET = "https://app.test/login"


def _jobs(usernames, passwords, fields=("user:{USER}", "pass:{PASS}"), **kwargs):
    return list(generate_jobs(usernames, passwords, parse_field_templates(fields), target=TARGET, **kwargs))


def test_job_count_is_cartesian_product():
    jobs = _jobs(["a", "b"], ["x", "y", "z"])

    assert len(jobs) == 6 == count_jobs(["a", "b"], ["x", "y", "z"])
    assert len({(j.credential.username, j.credential.password) for j in jobs}) == 6


def test_passwords_vary_fastest():
    jobs = _jobs(["u1", "u2"], ["p1", "p2"])

    assert [(j.credential.username, j.credential.password) for j in jobs] == [
        ("u1", "p1"),
        ("u1", "p2"),
        ("u2", "p1"),
        ("u2", "p2"),
    ]
    assert [j.index for j in jobs] == [0, 1, 2, 3]


def test_fields_follow_template_order():
    jobs = _jobs(["bob"], ["pw"], fields=("csrf:static", "pass:{PASS}", "user:{USER}"))

    assert [(f.key, f.value) for f in jobs[0].fields] == [
        ("csrf", "static"),
        ("pass", "pw"),
        ("user", "bob"),
    ]
    assert jobs[0].target == TARGET


def test_fields_are_never_shared_between_jobs():
    jobs = _jobs(["a"], ["x", "y"], fields=("static:same",))

    assert jobs[0].fields[0] == jobs[1].fields[0]
    assert jobs[0].fields[0] is not jobs[1].fields[0]


def test_empty_list_yields_no_jobs():
    assert _jobs([], ["x"]) == []
    assert _jobs(["a"], []) == []


def test_generation_is_lazy():
    usernames = [f"u{i}" for i in range(2000)]
    passwords = [f"p{i}" for i in range(2000)]
    templates = parse_field_templates(["user:{USER}"])

    first = list(itertools.islice(generate_jobs(usernames, passwords, templates, target=TARGET), 3))

    assert [j.credential.password for j in first] == ["p0", "p1", "p2"]


def test_offsets_follow_interval():
    jobs = _jobs(["a", "b"], ["x", "y"], interval_ms=100)

    assert [j.launch_offset_seconds for j in jobs] == pytest.approx([0.0, 0.1, 0.2, 0.3])


@pytest.mark.parametrize("interval", [None, 0])
def test_no_interval_means_no_delay(interval):
    assert launch_offset(5, interval) == 0.0
    assert all(j.launch_offset_seconds == 0.0 for j in _jobs(["a"], ["x", "y"], interval_ms=interval))
