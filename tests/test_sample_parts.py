"""
Tests for the sample part generator
"""

import random

import pytest

from part_extractor import NAME_MAX_LENGTH, parse_availability
from sample_parts import SAMPLE_NOTE, SAMPLE_SOURCE, SamplePartGenerator

KNOWN_SUPPLIERS = {'Grainger', 'McMaster-Carr', 'Fastenal'}


@pytest.mark.parametrize('query,expected_part_numbers', [
    ('6203 bearing', ['6203-2Z', '6203-RS']),
    ('6203', ['6203-2Z', '6203-RS']),
    ('Hydraulic cylinder SEAL kit', ['CR-25x35x7', 'VS-40x52x7']),
    ('hex bolt m8', ['M8x25-HEX', '1/4-20x1']),
    ('machine screw', ['M8x25-HEX', '1/4-20x1']),
    ('A48 v-belt', ['A48', '3L300']),
    ('hydraulic return filter', ['CR-25x35x7', 'VS-40x52x7']),
    ('oil filter element', ['HF-6553']),
])
def test_keyword_categories(query, expected_part_numbers):
    records = SamplePartGenerator().generate(query)
    assert [r.part_number for r in records] == expected_part_numbers


def test_category_records_are_flagged():
    for record in SamplePartGenerator().generate('bearing'):
        assert record.note == SAMPLE_NOTE
        assert record.source == SAMPLE_SOURCE
        assert record.supplier in KNOWN_SUPPLIERS
        assert record.product_url.startswith('https://')
        assert record.price_text.startswith('$')


def test_unmatched_query_gets_one_generic_part(seeded_rng):
    records = SamplePartGenerator(seeded_rng).generate('flux capacitor')

    assert len(records) == 1
    record = records[0]
    assert record.part_number.startswith('IND-')
    assert len(record.part_number) == 10
    assert record.part_number[4:].isalnum() and record.part_number[4:].upper() == record.part_number[4:]
    assert record.name == 'Industrial Component for "flux capacitor"'
    assert 10 <= record.price <= 60
    assert record.supplier in {'Grainger', 'McMaster-Carr'}
    assert record.availability in {'In Stock', '2-3 Day Lead Time'}
    assert record.in_stock is parse_availability(record.availability)
    assert record.note == SAMPLE_NOTE


def test_generic_part_is_deterministic_under_seed():
    first = SamplePartGenerator(random.Random(99)).generate('gizmo')[0]
    second = SamplePartGenerator(random.Random(99)).generate('gizmo')[0]
    assert (first.part_number, first.price, first.supplier) == (second.part_number, second.price, second.supplier)


def test_generic_name_is_capped():
    record = SamplePartGenerator(random.Random(7)).generate('x' * 500)[0]
    assert len(record.name) == NAME_MAX_LENGTH
    assert record.name.startswith('Industrial Component for "xxx')


@pytest.mark.parametrize('query', ['', '   ', '!!', 'zz'])
def test_never_empty(query):
    records = SamplePartGenerator().generate(query)
    assert len(records) >= 1
    assert all(r.note and r.part_number and r.name for r in records)
