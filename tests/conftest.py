from __future__ import annotations

import types
from typing import Optional

import pytest

from svdgen.codegen.items import PeripheralUnit
from svdgen.emit.python import render_peripheral
from svdgen.svd.model import (
    Access,
    ArrayInfo,
    ArrayRegister,
    Defaults,
    EnumeratedValue,
    EnumeratedValueSet,
    Field,
    Peripheral,
    RegisterInfo,
    SingleRegister,
)

DEMO_SVD = """\
<device>
  <name>DEMO</name>
  <size>32</size>
  <resetValue>0x00000000</resetValue>
  <peripherals>
    <peripheral>
      <name>TIMER0</name>
      <baseAddress>0x40000000</baseAddress>
      <description>Timer</description>
      <access>read-write</access>
      <registers>
        <register>
          <name>CTRL</name>
          <addressOffset>0x0</addressOffset>
          <resetValue>0x10</resetValue>
          <fields>
            <field>
              <name>EN</name>
              <bitOffset>0</bitOffset>
              <bitWidth>1</bitWidth>
            </field>
            <field>
              <name>MODE</name>
              <lsb>1</lsb>
              <msb>2</msb>
              <access>writeOnce</access>
              <enumeratedValues>
                <name>MODE</name>
                <usage>read-write</usage>
                <enumeratedValue><name>ONESHOT</name><value>0</value></enumeratedValue>
                <enumeratedValue><name>PERIODIC</name><value>#01</value></enumeratedValue>
                <enumeratedValue><name>ANY</name><value>#1x</value></enumeratedValue>
                <enumeratedValue><name>OTHER</name><isDefault>true</isDefault></enumeratedValue>
              </enumeratedValues>
            </field>
            <field>
              <name>PRESCALE</name>
              <bitRange>[5:4]</bitRange>
              <enumeratedValues derivedFrom="CTRL.MODE"/>
            </field>
          </fields>
        </register>
        <register>
          <name>CC[%s]</name>
          <addressOffset>0x10</addressOffset>
          <dim>4</dim>
          <dimIncrement>4</dimIncrement>
          <dimIndex>0-3</dimIndex>
          <size>16</size>
        </register>
        <cluster><name>EXTRA</name></cluster>
      </registers>
    </peripheral>
    <peripheral derivedFrom="TIMER0">
      <name>TIMER1</name>
      <baseAddress>0x40001000</baseAddress>
    </peripheral>
  </peripherals>
</device>
"""


def ev_set(*pairs, name=None, usage=None, derived_from=None) -> EnumeratedValueSet:
    return EnumeratedValueSet(
        name=name,
        derived_from=derived_from,
        usage=usage,
        values=tuple(EnumeratedValue(name=n, value=v, description=f"{n} mode") for n, v in pairs),
    )


def reg(name, offset, *fields, size=32, access=None, reset_value=None, description=None, no_fields=False):
    return SingleRegister(
        RegisterInfo(
            name=name,
            address_offset=offset,
            description=description,
            size=size,
            access=access,
            reset_value=reset_value,
            fields=None if no_fields else tuple(fields),
        )
    )


def array_reg(name, offset, count, increment, *fields, labels=None, size=32, reset_value=0):
    return ArrayRegister(
        info=RegisterInfo(
            name=name,
            address_offset=offset,
            size=size,
            reset_value=reset_value,
            fields=tuple(fields) if fields else None,
        ),
        array=ArrayInfo(count=count, increment=increment, index_labels=labels),
    )


def load_unit(unit: PeripheralUnit, source: Optional[str] = None) -> types.ModuleType:
    """Render `unit` and execute it as a fresh module."""
    if source is None:
        source = render_peripheral(unit)
    module = types.ModuleType(f"generated_{unit.module_name}")
    exec(compile(source, f"<{module.__name__}>", "exec"), module.__dict__)
    return module


@pytest.fixture
def uart() -> Peripheral:
    """A small UART covering the register shapes the generator distinguishes."""
    mode = ev_set(("IDLE", 0), ("TX", 1), ("RX", 2))
    parity = ev_set(("NONE", 0), ("EVEN", 1), ("ODD", 2), ("MARK", 3), name="PARITY")
    return Peripheral(
        name="UART0",
        base_address=0x4000_1000,
        description="Universal asynchronous receiver/transmitter",
        registers=(
            reg(
                "CTRL", 0x00,
                Field("EN", 0, 1, description="Enable"),
                Field("MODE", 1, 2, description="Operating mode", enumerated_value_sets=(mode,)),
                Field("BAUD", 4, 8, description="Baud divider"),
                Field("PAR", 12, 2, enumerated_value_sets=(parity,)),
                Field("RESERVED", 14, 2),
                reset_value=0x0000_0512,
                description="Control register",
            ),
            reg(
                "STATUS", 0x04,
                Field("BUSY", 0, 1, access=Access.READ_ONLY),
                Field(
                    "STATE", 1, 2, access=Access.READ_ONLY,
                    enumerated_value_sets=(ev_set(derived_from="CTRL.MODE"),),
                ),
                reset_value=0,
            ),
            reg("DATA", 0x08, no_fields=True, reset_value=0, description="Data"),
            reg("CMD", 0x10, Field("START", 0, 1), Field("ABORT", 1, 1), access=Access.WRITE_ONLY, reset_value=0),
            reg("ID", 0x14, no_fields=True, access=Access.READ_ONLY, reset_value=0x1234),
            reg("SCRATCH", 0x18, Field("VALUE", 0, 16)),
        ),
    )


@pytest.fixture
def defaults() -> Defaults:
    return Defaults(size=32, reset_value=None)
