"""Shared fixtures: small system models used across the test suite."""

import pytest

from ssdl.builder import component, interface, requirement, system
from ssdl.core.models import (
    BooleanValue,
    InterfaceType,
    ListValue,
    NumberValue,
    Priority,
    RequirementType,
    StringValue,
    VerificationMethod,
)


@pytest.fixture
def automotive_system():
    """Automotive control system: three components, two root requirements, no interfaces."""
    return (
        system("ACS-001", "AutomotiveControlSystem")
        .with_description("Advanced driver assistance and control system")
        .with_component(
            component("EC-001", "EngineController")
            .with_description("Controls engine operations and performance")
            .with_property("type", StringValue("ECU"))
            .with_property("processingPower", NumberValue(2.4, "GHz"))
            .with_property("version", StringValue("2.1.0"))
            .with_property("compliance", StringValue("ISO 26262"))
            .build()
        )
        .with_component(
            component("BC-001", "BrakeController")
            .with_description("Manages braking system and ABS")
            .with_property("type", StringValue("Safety Critical"))
            .with_property("responseTime", NumberValue(50.0, "ms"))
            .with_property("maxPower", NumberValue(150.0, "kW"))
            .build()
        )
        .with_component(
            component("SA-001", "SensorArray")
            .with_description("Collection of environmental sensors")
            .with_property(
                "sensors",
                ListValue((StringValue("Camera"), StringValue("LiDAR"), StringValue("Radar"))),
            )
            .with_property("isActive", BooleanValue(True))
            .build()
        )
        .with_requirement(
            requirement("REQ-001", "Engine Response Time")
            .with_description("Engine controller must respond to throttle input within 100ms")
            .of_type(RequirementType.PERFORMANCE)
            .with_priority(Priority.HIGH)
            .verified_by(VerificationMethod.TEST)
            .build()
        )
        .with_requirement(
            requirement("REQ-002", "Brake Safety")
            .with_description("Brake controller must engage emergency braking if obstacle detected")
            .of_type(RequirementType.SAFETY)
            .with_priority(Priority.CRITICAL)
            .verified_by(VerificationMethod.INSPECTION)
            .build()
        )
        .build()
    )


@pytest.fixture
def vehicle_system():
    """
    Vehicle with a powertrain subsystem and interfaces at both levels.

    Root interfaces:
        IF-001  SENS -> ECU   Data
        IF-002  ECU  -> PT    Control
        IF-003  BAT  -> ECU   Electrical
    Powertrain interfaces:
        IF-101  MOT  -> GB    Physical
    """
    safety = (
        requirement("REQ-S1", "Emergency stop")
        .with_description("Vehicle stops within 40 m from 100 km/h")
        .of_type(RequirementType.SAFETY)
        .with_priority(Priority.CRITICAL)
        .build()
    )
    motor_safety = (
        requirement("REQ-S2", "Motor cut-off")
        .with_description("Motor torque drops to zero on fault")
        .of_type(RequirementType.SAFETY)
        .with_priority(Priority.CRITICAL)
        .derived_from("REQ-S1")
        .build()
    )
    link_latency = (
        requirement("REQ-L1", "Sensor latency")
        .with_description("Sensor frames reach the ECU within 10 ms")
        .of_type(RequirementType.PERFORMANCE)
        .with_priority(Priority.HIGH)
        .verified_by(VerificationMethod.ANALYSIS)
        .build()
    )

    powertrain = (
        system("PT", "Powertrain")
        .with_component(component("MOT", "Motor").with_requirement(motor_safety).build())
        .with_component(component("GB", "Gearbox").build())
        .with_interface(interface("IF-101", "Drive shaft", "MOT", "GB", InterfaceType.PHYSICAL).build())
        .build()
    )

    return (
        system("VEH", "Vehicle")
        .with_subsystem(powertrain)
        .with_component(component("ECU", "Central ECU").build())
        .with_component(component("SENS", "Sensor Suite").build())
        .with_component(component("BAT", "Battery").with_property("capacity", NumberValue(75, "kWh")).build())
        .with_interface(
            interface("IF-001", "Sensor bus", "SENS", "ECU").with_requirement(link_latency).build()
        )
        .with_interface(interface("IF-002", "Torque command", "ECU", "PT", InterfaceType.CONTROL).build())
        .with_interface(interface("IF-003", "Supply", "BAT", "ECU", InterfaceType.ELECTRICAL).build())
        .with_requirement(safety)
        .build()
    )
