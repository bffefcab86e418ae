"""
Before/after bench data for testing records.

Clients send one of two shapes:

* structured objects (``beforeData`` / ``afterData``), stored as JSON, or
* the older flat form (``beforeRepair`` / ``afterRepair`` / ``injectorParams``),
  stored in the scalar columns.

Both are carried around as a tagged value::

    {"version": 1, "legacy": {"pressure": ..., "leak": ..., "calibration": ..., "passFail": ...}}
    {"version": 2, "data": {...}}
"""

import json

LEGACY = 1
STRUCTURED = 2

SIDES = ('before', 'after')

LEGACY_KEYS = {
    'pressure': 'pressure',
    'leak': 'leak',
    'calibration': 'calibration',
    'passFail': 'pass_fail',
}

INJECTOR_KEYS = {
    'pilotInjection': 'pilot_injection',
    'mainInjection': 'main_injection',
    'returnFlow': 'return_flow',
    'pressure': 'injector_pressure',
    'leakTest': 'leak_test',
}

APPROVAL_KEYS = {
    'testedBy': 'tested_by',
    'approvedBy': 'approved_by',
    'approvalDate': 'approval_date',
}


def parse_json_maybe(value):
    """Dicts pass through, JSON strings are decoded, anything else is None."""
    if not value:
        return None
    if isinstance(value, dict):
        return value
    if isinstance(value, str):
        try:
            decoded = json.loads(value)
        except ValueError:
            return None
        return decoded if isinstance(decoded, dict) else None
    return None


def structured(data):
    return {'version': STRUCTURED, 'data': data}


def legacy(values):
    return {'version': LEGACY, 'legacy': values}


def pass_fail(tagged, fallback=None):
    if not tagged:
        return fallback
    if tagged['version'] == LEGACY:
        return tagged['legacy'].get('passFail') or fallback

    data = tagged['data']
    for source in (data, data.get('finalResult'), data.get('result')):
        if isinstance(source, dict):
            value = source.get('passFail') or source.get('pass_fail')
            if value:
                return value
    return fallback


def _side(payload, side):
    data = parse_json_maybe(payload.get(f'{side}Data')) or parse_json_maybe(payload.get(f'{side}_data'))
    if data:
        return structured(data)
    values = parse_json_maybe(payload.get(f'{side}Repair'))
    if values:
        return legacy(values)
    return None


def normalize(payload):
    """
    Reads an inbound create/update body and returns::

        {'before': tagged or None, 'after': tagged or None,
         'injector_params': dict or None, 'approvals': dict or None,
         'category_type': str or None}
    """
    approvals = parse_json_maybe(payload.get('approvals'))
    if approvals is None:
        flat = {key: payload.get(column) for key, column in APPROVAL_KEYS.items() if payload.get(column) is not None}
        approvals = flat or None

    return {
        'before': _side(payload, 'before'),
        'after': _side(payload, 'after'),
        'injector_params': parse_json_maybe(payload.get('injectorParams')),
        'approvals': approvals,
        'category_type': payload.get('categoryType', payload.get('category_type')),
    }


def schema_version(normalized):
    """2 as soon as any structured data or approval field is present."""
    for side in SIDES:
        tagged = normalized.get(side)
        if tagged and tagged['version'] == STRUCTURED:
            return STRUCTURED
    approvals = normalized.get('approvals') or {}
    if any(approvals.get(key) for key in APPROVAL_KEYS):
        return STRUCTURED
    return LEGACY


def apply_to_record(record, normalized):
    """Copies a normalized payload onto a TestingRecord without saving it. Absent keys are left alone."""
    for side in SIDES:
        tagged = normalized.get(side)
        if not tagged:
            continue
        if tagged['version'] == STRUCTURED:
            setattr(record, f'{side}_data', tagged['data'])
            setattr(record, f'{side}_pass_fail', pass_fail(tagged, 'Fail'))
        else:
            for key, column in LEGACY_KEYS.items():
                if key in tagged['legacy']:
                    value = tagged['legacy'][key]
                    if column == 'pass_fail':
                        value = value or 'Fail'
                    setattr(record, f'{side}_{column}', value)

    injector = normalized.get('injector_params') or {}
    for key, column in INJECTOR_KEYS.items():
        if key in injector:
            value = injector[key]
            if column == 'leak_test':
                value = value or 'Fail'
            setattr(record, column, value)

    approvals = normalized.get('approvals') or {}
    for key, column in APPROVAL_KEYS.items():
        if key in approvals:
            setattr(record, column, approvals[key] or None)

    if normalized.get('category_type') is not None:
        record.category_type = normalized['category_type'] or None

    if schema_version(normalized) == STRUCTURED:
        record.schema_version = STRUCTURED
    return record


def from_record(record, side):
    """Rebuilds the tagged value for one side of a stored TestingRecord."""
    data = getattr(record, f'{side}_data')
    if data:
        return structured(data)
    return legacy({
        key: getattr(record, f'{side}_{column}')
        for key, column in LEGACY_KEYS.items()
    })


def repair_summary(record, side):
    """Flat pressure/leak/calibration/passFail view for either schema version."""
    tagged = from_record(record, side)
    if tagged['version'] == STRUCTURED:
        nested = tagged['data'].get(f'{side}Repair')
        if isinstance(nested, dict):
            return nested
        fallback = getattr(record, f'{side}_pass_fail')
        return {
            'pressure': getattr(record, f'{side}_pressure'),
            'leak': getattr(record, f'{side}_leak'),
            'calibration': getattr(record, f'{side}_calibration'),
            'passFail': pass_fail(tagged, fallback),
        }
    return tagged['legacy']


def injector_params(record):
    return {key: getattr(record, column) for key, column in INJECTOR_KEYS.items()}
