"""Behaviour of rendered modules, executed against an in-memory register file."""
import pytest
from conftest import ev_set, load_unit, reg
from hypothesis import given
from hypothesis import strategies as st

from svdgen.codegen.peripheral import gen_peripheral
from svdgen.runtime import RegisterFile, UnsafeAccessError
from svdgen.svd.model import Defaults, Field, Peripheral

BASE = 0x4000_1000


@pytest.fixture
def module(uart):
    return load_unit(gen_peripheral(uart, Defaults()))


@pytest.fixture
def mem(module):
    return RegisterFile(reset_values=module.Uart0.reset_values(BASE))


@pytest.fixture
def block(module, mem):
    return module.Uart0(mem, BASE)


def test_block_layout(module, block):
    assert module.Uart0.SIZE == 0x1C
    assert module.Uart0.offset_of("cmd") == 0x10
    assert module.Uart0.register_at(0x14) == "id"
    assert module.Uart0.register_at(0x0C) is None
    assert block.cmd.address == BASE + 0x10
    assert isinstance(block.scratch, module.Scratch)


def test_identity_write_reproduces_reset(module, mem, block):
    mem.poke(BASE, 0xFFFF_FFFF)
    block.ctrl.write(lambda w: w)

    assert mem.peek(BASE) == 0x512
    r = block.ctrl.read()
    assert r.bits == 0x512
    assert r.en() is False
    assert r.mode() is module.CtrlRMode.Tx
    assert r.mode().is_tx()
    assert not r.mode().is_idle()
    assert r.baud() == 0x51
    assert r.par() is module.CtrlRParity.None_


def test_write_starts_from_reset_value(module, mem, block):
    block.ctrl.write(lambda w: w.en(True).baud(0x0F))
    r = block.ctrl.read()
    assert r.en() is True
    assert r.baud() == 0x0F
    assert r.mode() is module.CtrlRMode.Tx
    assert mem.writes == {BASE: 1}


def test_modify_reads_once_and_writes_once(module, mem, block):
    block.ctrl.modify(lambda r, w: w.baud(r.baud() + 1))

    assert mem.reads == {BASE: 1}
    assert mem.writes == {BASE: 1}
    assert block.ctrl.read().baud() == 0x52


def test_field_sub_proxy_chains_back_to_writer(module, block):
    block.ctrl.modify(lambda r, w: w.mode().rx().par().odd().en(True))
    r = block.ctrl.read()
    assert r.mode() is module.CtrlRMode.Rx
    assert r.par() is module.CtrlRParity.Odd
    assert r.en() is True


def test_enum_setter(module, block):
    block.ctrl.write(lambda w: w.mode_enum(module.CtrlWMode.Idle))
    assert block.ctrl.read().mode() is module.CtrlRMode.Idle


def test_partial_enum_bits_need_unsafe(module, block):
    with pytest.raises(UnsafeAccessError):
        block.ctrl.write(lambda w: w.mode_bits(3))

    block.ctrl.write(lambda w: w.mode_bits(3, unsafe=True))
    mode = block.ctrl.read().mode()
    assert mode is module.CtrlRMode._Reserved11
    assert mode.is_reserved
    assert mode.bits() == 3


def test_total_enum_bits_are_safe(module, block):
    block.ctrl.write(lambda w: w.par_bits(3))
    assert block.ctrl.read().par() is module.CtrlRParity.Mark


def test_raw_register_access_needs_unsafe(mem, block):
    with pytest.raises(UnsafeAccessError):
        block.ctrl.write_bits(0)
    with pytest.raises(UnsafeAccessError):
        block.ctrl.modify_bits(lambda bits: bits)

    block.ctrl.write_bits(0xABCD, unsafe=True)
    assert block.ctrl.read_bits() == 0xABCD
    block.ctrl.modify_bits(lambda bits: bits | 1, unsafe=True)
    assert mem.peek(BASE) == 0xABCD


def test_closure_must_return_the_writer(block):
    with pytest.raises(TypeError):
        block.ctrl.write(lambda w: 5)


def test_derived_enum_is_an_alias(module, mem, block):
    assert module.StatusRMode is module.CtrlRMode
    mem.poke(BASE + 0x04, 0b101)
    r = block.status.read()
    assert r.busy() is True
    assert r.state() is module.CtrlRMode.Rx


def test_read_only_and_write_only_registers(mem, block):
    assert not hasattr(block.status, "write")
    assert not hasattr(block.status, "modify")
    assert not hasattr(block.id, "write")
    assert block.id.read() == 0x1234

    assert not hasattr(block.cmd, "read")
    block.cmd.write(lambda w: w.start(True))
    assert mem.peek(BASE + 0x10) == 0x1
    block.cmd.write(lambda w: w.abort(True))
    assert mem.peek(BASE + 0x10) == 0x2


def test_fieldless_register_takes_plain_values(mem, block):
    block.data.write(0x1_0000_00AB)
    assert block.data.read() == 0xAB


def test_register_without_reset_value_writes_values(module, block):
    assert not hasattr(module.ScratchW, "reset_value")
    block.scratch.write(0x41)
    block.scratch.modify(lambda r, w: w.value(r.value() + 1))
    assert block.scratch.read().value() == 0x42


def test_generated_module_text(uart):
    from svdgen.emit.python import render_peripheral

    source = render_peripheral(gen_peripheral(uart, Defaults()))
    assert source.startswith('"""Register access for the UART0 peripheral.')
    assert "Universal asynchronous receiver/transmitter" in source
    assert "class Uart0(RegisterBlock):" in source
    assert "    # IDLE mode\n    Idle = 0x0\n" in source
    assert "Reserved('_reserved0', 0x4)," in source
    compile(source, "uart0.py", "exec")


def test_descriptions_are_escaped():
    p = Peripheral(
        name="Q",
        description='Quotes " and \\ backslashes"',
        registers=(reg("R", 0, no_fields=True, description='say "hi"'),),
    )
    module = load_unit(gen_peripheral(p, Defaults(reset_value=0)))
    assert module.R.__doc__ == 'say "hi"'
    assert module.Q.__doc__ == 'Quotes " and \\ backslashes"'


WIDE = Peripheral(
    name="ADC",
    registers=(
        reg(
            "CFG", 0,
            Field("LEVEL", 0, 10, enumerated_value_sets=(ev_set(("LOW", 0), ("MID", 0x1FF), ("HIGH", 0x3FF)),)),
            Field("GAIN", 12, 3, enumerated_value_sets=(ev_set(("X1", 0), ("X2", 1), ("X4", 2)),)),
            reset_value=0,
        ),
    ),
)
adc = load_unit(gen_peripheral(WIDE, Defaults()))


@given(st.integers(min_value=0, max_value=(1 << 10) - 1))
def test_wide_read_decode_is_total(code):
    value = adc.CfgRLevel.from_bits(code)
    assert value.bits() == code
    assert adc.CfgRLevel.from_bits(code) is value
    assert value.is_reserved == (code not in (0, 0x1FF, 0x3FF))


@given(st.integers(min_value=0, max_value=7))
def test_narrow_read_decode_is_total(code):
    value = adc.CfgRGain.from_bits(code)
    assert value.bits() == code
    assert value.is_reserved == (code > 2)


@pytest.mark.parametrize("enum_name", ["CfgRLevel", "CfgRGain"])
def test_decode_inverts_encode(enum_name):
    enum = getattr(adc, enum_name)
    for variant in enum:
        assert enum.from_bits(variant.bits()) is variant


@given(st.integers(min_value=0, max_value=(1 << 32) - 1))
def test_field_readers_match_stored_bits(bits):
    mem = RegisterFile()
    cfg = adc.Adc(mem, 0).cfg
    mem.poke(0, bits)
    r = cfg.read()
    assert r.level().bits() == bits & 0x3FF
    assert r.gain().bits() == (bits >> 12) & 0x7


def test_imported_runtime_names_stay_bound():
    import svdgen.runtime
    from svdgen.codegen.context import MODULE_NAMES

    p = Peripheral(name="P", registers=(reg("SLOT", 0, no_fields=True), reg("REGISTER", 4, no_fields=True)))
    module = load_unit(gen_peripheral(p, Defaults(reset_value=0)))
    for name in MODULE_NAMES - {"annotations", "Callable"}:
        assert getattr(module, name) is getattr(svdgen.runtime, name)

    mem = RegisterFile()
    block = module.P(mem, 0)
    assert isinstance(block.slot, module.Slot_1)
    assert isinstance(block.register, module.Register_1)
    block.slot.write(7)
    assert block.slot.read() == 7


def test_reader_class_does_not_replace_a_register_type():
    p = Peripheral(
        name="P",
        registers=(
            reg("CTRL", 0, Field("EN", 0, 1), reset_value=0),
            reg("CTRL_R", 4, Field("GO", 0, 1), reset_value=0),
        ),
    )
    module = load_unit(gen_peripheral(p, Defaults()))
    mem = RegisterFile()
    block = module.P(mem, 0)
    block.ctrl.write(lambda w: w.en(True))
    block.ctrl_r.write(lambda w: w.go(True))
    assert isinstance(block.ctrl.read(), module.CtrlR_1)
    assert block.ctrl.read().en() is True
    assert isinstance(block.ctrl_r, module.CtrlR)
    assert block.ctrl_r.read().go() is True


def test_same_named_sets_decode_with_their_own_variants():
    p = Peripheral(
        name="P",
        registers=(
            reg(
                "CR", 0,
                Field("A", 0, 2, enumerated_value_sets=(ev_set(("X", 0), ("Y", 1), name="MODE"),)),
                Field("B", 2, 2, enumerated_value_sets=(ev_set(("P", 0), ("Q", 1), ("R", 2), name="MODE"),)),
                reset_value=0,
            ),
        ),
    )
    module = load_unit(gen_peripheral(p, Defaults()))
    mem = RegisterFile()
    cr = module.P(mem, 0).cr
    mem.poke(0, 0b1000)
    r = cr.read()
    assert r.a() is module.CrRMode.X
    assert r.b() is module.CrRMode_1.R
    cr.write(lambda w: w.b().q())
    assert cr.read().b() is module.CrRMode_1.Q


def test_enum_setter_rejects_values_wider_than_the_field():
    wide = Field("SRC", 0, 3, enumerated_value_sets=(ev_set(("LOW", 1), ("BIG", 5), name="LEVEL"),))
    narrow = Field("DST", 0, 2, enumerated_value_sets=(ev_set(derived_from="A.SRC"),))
    p = Peripheral(name="P", registers=(reg("A", 0, wide, reset_value=0), reg("B", 4, narrow, reset_value=0)))
    module = load_unit(gen_peripheral(p, Defaults()))
    mem = RegisterFile()
    b = module.P(mem, 0).b

    b.write(lambda w: w.dst_enum(module.BWLevel.Low))
    assert mem.peek(4) == 1
    with pytest.raises(ValueError):
        b.write(lambda w: w.dst_enum(module.BWLevel.Big))
    assert mem.peek(4) == 1


def test_odd_sized_register_accesses_whole_bytes():
    p = Peripheral(
        name="P",
        registers=(reg("WIDE", 0, no_fields=True, size=24), reg("NEXT", 3, no_fields=True, size=8)),
    )
    module = load_unit(gen_peripheral(p, Defaults(reset_value=0)))
    assert module.Wide.SIZE == 3
    assert module.P.offset_of("next") == 3
    assert module.P.SIZE == 4

    mem = RegisterFile()
    block = module.P(mem, 0)
    mem.poke(0, 0xAABBCCDD)
    assert block.wide.read() == 0xBBCCDD
