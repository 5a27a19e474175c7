# Cursor-Cortex MCP Server
#
# Modular package structure:
# - config.py: Settings, storage layout and path functions
# - utils.py: Exceptions, regex patterns, validation and async file helpers
# - models.py: Pydantic models shared between modules
# - sections.py: Branch note section parser and filters
# - branch_notes.py: Append log, read/filter views, archive, clear and listing
# - generators.py: Commit message and Jira comment drafts
# - context_files.py: Context file functions
# - checklists.py: Completion checklist functions
# - knowledge.py: Tacit knowledge documents
# - scoring.py: Knowledge Archaeology heuristics
# - survey.py: Enhanced branch survey report
# - narrative.py: Project narrative report
# - arguments.py: Tool request models and argument decoding
# - tools.py: MCP tool handlers and server instance
# - main.py: Entry point and server initialization
# - cli.py: Command line interface
# - server.py: Module exposing all public APIs
