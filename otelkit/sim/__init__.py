"""Scenario-based trace and log simulator that records spans in memory."""