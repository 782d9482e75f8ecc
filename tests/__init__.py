"""
Test suite for the half-cell potential mapping MCP server.

Organization:
- test_grid.py - Survey grid model
- test_electrode_catalog.py - Electrode CSV catalog and survey parameters
- test_statistics_backend.py - Band classification and statistics
- test_gradient_backend.py - Gradient field and summary
- test_recommendation_rules.py - Rule groups and overall interpretation
- test_grid_csv.py - CSV import/export
- test_state_container.py - Assessment context and analysis cache
- test_report_builder.py - Report document, rendering orchestration, JSON writer
- test_server_tools.py - FastMCP tool round-trips

Run with:
    pytest tests/
    pytest tests/ --cov=core --cov=tools --cov=utils
"""
