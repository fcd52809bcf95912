"""
Tests for the converter registry: registration, ordering and resolution.
"""
import threading

import pytest
from dbtypes import helpers
from dbtypes.classify import PocoPlaceholder
from dbtypes.converters import SqlToTypeConverter, TypeToSqlConverter
from dbtypes.converters import create_static_sql_converter
from dbtypes.converters import create_static_type_converter
from dbtypes.descriptors import LanguageTypeDescriptor, SqlTypeDescriptor
from dbtypes.exceptions import RegistrationError, ValidationError
from dbtypes.registry import ConverterRegistry


def _static(sql_type):
    return create_static_sql_converter(sql_type, sql_type)


def test_register_rejects_bad_arguments():
    """Test null converters, null keys and unhashable keys fail fast"""
    registry = ConverterRegistry('test')

    with pytest.raises(RegistrationError):
        registry.register_type_converter(int, None)
    with pytest.raises(RegistrationError):
        registry.register_type_converter(None, _static('int'))
    with pytest.raises(RegistrationError):
        registry.register_type_converter([], _static('int'))
    with pytest.raises(RegistrationError):
        registry.register_sql_converter('', create_static_type_converter('x', int))
    with pytest.raises(RegistrationError):
        registry.register_sql_converter('int', _static('int'))
    with pytest.raises(RegistrationError):
        TypeToSqlConverter('not callable')

    assert registry.is_empty()


def test_first_non_none_result_wins():
    """Test converters under one key run in registration order"""
    registry = ConverterRegistry('test')
    registry.register_type_converter(int, TypeToSqlConverter(lambda d: None, 'declines'))
    registry.register_type_converter(int, _static('integer'))
    registry.register_type_converter(int, _static('bigint'))

    result = registry.resolve_sql_type(LanguageTypeDescriptor(int))
    assert result.sql_type_name == 'integer', f'Expected integer, got {result}'


def test_prepend_overrides_without_removing():
    """Test prepending places a converter ahead of existing ones"""
    registry = ConverterRegistry('test')
    registry.register_type_converter(int, _static('integer'))
    registry.register_type_converter(int, _static('bigint'), prepend=True)

    assert registry.resolve_sql_type(LanguageTypeDescriptor(int)).sql_type_name == 'bigint'
    assert [c.name for c in registry.get_type_converters(int)] == ['bigint', 'integer']


def test_resolution_uses_classification_order():
    """Test exact keys win over supertypes and the POCO placeholder"""
    class Name(str):
        pass

    class Customer:
        pass

    registry = ConverterRegistry('test')
    registry.register_type_converter(str, _static('varchar(255)'))
    registry.register_type_converter(PocoPlaceholder, _static('json'))

    assert registry.resolve_sql_type(LanguageTypeDescriptor(str)).sql_type_name == 'varchar(255)'
    assert registry.resolve_sql_type(LanguageTypeDescriptor(Name)).sql_type_name == 'varchar(255)'
    assert registry.resolve_sql_type(LanguageTypeDescriptor(Customer)).sql_type_name == 'json'


def test_missing_mapping_returns_none():
    """Test an unregistered type resolves to None instead of raising"""
    registry = ConverterRegistry('test')
    registry.register_type_converter(int, _static('int'))

    assert registry.resolve_sql_type(LanguageTypeDescriptor(bytes)) is None
    assert registry.resolve_language_type(SqlTypeDescriptor.parse('blob')) is None


def test_resolve_requires_descriptors():
    registry = ConverterRegistry('test')
    with pytest.raises(ValidationError):
        registry.resolve_sql_type(int)
    with pytest.raises(ValidationError):
        registry.resolve_language_type('int')


def test_sql_names_are_case_insensitive():
    """Test SQL converters are keyed by lower-case base name"""
    registry = ConverterRegistry('test')
    registry.register_sql_converter('VARCHAR', create_static_type_converter('str', str))

    result = registry.resolve_language_type(SqlTypeDescriptor.parse('VarChar(10)'))
    assert result.base_type is str
    assert result.length == 10, 'Metadata should be carried from the SQL descriptor'
    assert registry.sql_type_names() == ('varchar',)


def test_resolution_is_deterministic_and_cached():
    """Test repeated resolution returns the same result without reconverting"""
    calls = []

    def to_sql(d):
        calls.append(d)
        return helpers.create_simple_type('int')

    registry = ConverterRegistry('test')
    registry.register_type_converter(int, TypeToSqlConverter(to_sql))

    first = registry.resolve_sql_type(LanguageTypeDescriptor(int))
    second = registry.resolve_sql_type(LanguageTypeDescriptor(int))
    assert first == second
    assert len(calls) == 1, f'Expected one conversion, got {len(calls)}'


def test_registration_invalidates_cached_results():
    """Test a new registration is visible to later resolutions"""
    registry = ConverterRegistry('test')
    registry.register_type_converter(int, _static('int'))
    assert registry.resolve_sql_type(LanguageTypeDescriptor(int)).sql_type_name == 'int'

    version = registry.version
    registry.register_type_converter(int, _static('bigint'), prepend=True)
    assert registry.version > version
    assert registry.resolve_sql_type(LanguageTypeDescriptor(int)).sql_type_name == 'bigint'


def test_registries_do_not_share_cache_entries():
    """Test two registries with the same name keep separate results"""
    a = ConverterRegistry('same')
    b = ConverterRegistry('same')
    a.register_type_converter(int, _static('int'))
    b.register_type_converter(int, _static('integer'))

    assert a.cache_key != b.cache_key
    assert a.resolve_sql_type(LanguageTypeDescriptor(int)).sql_type_name == 'int'
    assert b.resolve_sql_type(LanguageTypeDescriptor(int)).sql_type_name == 'integer'


def test_concurrent_registration_and_resolution():
    """Test readers never fail while writers append converters"""
    registry = ConverterRegistry('test')
    registry.register_type_converter(int, _static('int'))
    errors = []
    writers, per_writer = 8, 50
    start = threading.Barrier(writers + 4)

    def writer(n):
        start.wait()
        for i in range(per_writer):
            registry.register_type_converter(int, _static(f'int{n}x{i}'))
            registry.register_sql_converter(f'type{n}x{i}', create_static_type_converter('i', int))

    def reader():
        start.wait()
        try:
            for _ in range(200):
                result = registry.resolve_sql_type(LanguageTypeDescriptor(int))
                assert result.sql_type_name == 'int'
                for key in registry.type_keys():
                    registry.get_type_converters(key)
        except Exception as e:
            errors.append(e)

    threads = [threading.Thread(target=writer, args=(n,)) for n in range(writers)]
    threads += [threading.Thread(target=reader) for _ in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert not errors, f'Readers failed: {errors}'
    assert len(registry.get_type_converters(int)) == 1 + writers * per_writer
    assert len(registry.sql_type_names()) == writers * per_writer


def test_converter_repr_and_call():
    converter = SqlToTypeConverter(lambda d: None, 'noop')
    assert repr(converter) == "SqlToTypeConverter('noop')"
    assert converter(SqlTypeDescriptor.parse('int')) is None
