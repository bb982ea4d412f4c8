"""
Flask-based Web API for archgen.

Renders architecture documents from project records posted as JSON, for
callers that already know their workspace layout (CI jobs, editors).

Endpoints:
    POST /api/generate  - Render ARCHITECTURE.md and/or the structure model
    POST /api/structure - Return only the tree, graph and subgraph model
    GET  /api/health    - Health check endpoint
"""

from typing import Any

from flask import Flask, Response, jsonify, request

from archgen import __version__
from archgen.errors import MalformedInputError
from archgen.graph import build_dependency_graph, generate_dependency_graph
from archgen.normalizer import normalize_projects
from archgen.renderer import RenderOptions, render_architecture
from archgen.schema import DependencyGraph, Project
from archgen.tree import generate_folder_tree

app = Flask(__name__)
app.config["MAX_CONTENT_LENGTH"] = 5 * 1024 * 1024  # 5MB max body

OUTPUT_FORMATS = ("markdown", "json", "both")


def graph_to_dict(graph: DependencyGraph) -> dict[str, Any]:
    """
    Convert a DependencyGraph to a JSON-serializable dictionary.
    """
    return {
        "subgraphs": [
            {
                "key": subgraph.key,
                "members": [member.name for member in subgraph.members],
                "depends_on": list(subgraph.depends_on),
            }
            for subgraph in graph.subgraphs
        ],
        "root_projects": [project.name for project in graph.root_projects],
        "edges": [list(edge) for edge in graph.edges],
    }


def structure_to_dict(projects: list[Project]) -> dict[str, Any]:
    """Tree text, graph text and graph model for a list of projects."""
    return {
        "tree": generate_folder_tree(projects),
        "graph": generate_dependency_graph(projects),
        "model": graph_to_dict(build_dependency_graph(projects)),
    }


def _read_payload() -> dict[str, Any]:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise MalformedInputError("Request body must be a JSON object")
    if not isinstance(data.get("projects"), list):
        raise MalformedInputError("'projects' must be a list of project records")
    return data


def _flag(data: dict[str, Any], key: str, default: bool) -> bool:
    value = data.get(key, default)
    if not isinstance(value, bool):
        raise MalformedInputError(f"'{key}' must be true or false")
    return value


def _projects(data: dict[str, Any]) -> list[Project]:
    root = data.get("root")
    if root is not None and not isinstance(root, str):
        raise MalformedInputError("'root' must be a string")
    return normalize_projects(data["projects"], root=root)


@app.route("/api/health", methods=["GET"])
def health_check() -> Response:
    """Health check endpoint."""
    return jsonify({"status": "healthy", "version": __version__})


@app.route("/api/generate", methods=["POST"])
def generate_architecture() -> tuple[Response, int]:
    """
    Generate an architecture document from posted project records.

    JSON body:
        - projects: list of {name, path, dependencies, devDependencies}
        - root: absolute repository root the paths live under (optional)
        - name: repository name (optional)
        - description: text under the title (optional)
        - tech_stack: Markdown bullet list (optional)
        - include_tech_stack / include_project_structure /
          include_dependency_graph / include_generation_notice: bool
        - format: 'markdown' | 'json' | 'both' (default: 'both')

    Returns:
        JSON response with:
            - architecture: The rendered Markdown (if format includes markdown)
            - structure: Tree, graph and model (if format includes json)
    """
    try:
        data = _read_payload()
        output_format = data.get("format", "both")
        if output_format not in OUTPUT_FORMATS:
            raise MalformedInputError(f"Unknown format: {output_format}")

        projects = _projects(data)
        options = RenderOptions(
            include_tech_stack=_flag(data, "include_tech_stack", True),
            include_project_structure=_flag(data, "include_project_structure", True),
            include_dependency_graph=_flag(data, "include_dependency_graph", True),
            include_generation_notice=_flag(data, "include_generation_notice", False),
        )

        response_data: dict[str, Any] = {"success": True}

        if output_format in ("markdown", "both"):
            response_data["architecture"] = render_architecture(
                projects,
                name=data.get("name"),
                description=data.get("description"),
                tech_stack=data.get("tech_stack") or "",
                options=options,
            )

        if output_format in ("json", "both"):
            response_data["structure"] = structure_to_dict(projects)

        return jsonify(response_data), 200

    except ValueError as e:
        return jsonify({"error": str(e)}), 400
    except Exception as e:
        return jsonify({"error": f"Processing failed: {str(e)}"}), 500


@app.route("/api/structure", methods=["POST"])
def get_structure() -> tuple[Response, int]:
    """
    Return the structure model without rendering a document.

    Useful for integrations that assemble their own documents.
    """
    try:
        data = _read_payload()
        projects = _projects(data)
        return jsonify({"success": True, "structure": structure_to_dict(projects)}), 200
    except ValueError as e:
        return jsonify({"error": str(e)}), 400


@app.errorhandler(413)
def request_entity_too_large(error):
    """Handle body too large errors."""
    return jsonify({"error": "Request too large. Maximum size is 5MB."}), 413


@app.errorhandler(500)
def internal_server_error(error):
    """Handle internal server errors."""
    return jsonify({"error": "Internal server error"}), 500


def create_app() -> Flask:
    """
    Application factory for creating the Flask app.

    Returns:
        Configured Flask application instance.
    """
    return app


def main() -> None:
    """Run the development server."""
    print("Starting archgen API server...")
    print()
    print("API Endpoints:")
    print("  POST /api/generate  - Render ARCHITECTURE.md from project records")
    print("  POST /api/structure - Get tree, graph and model only")
    print("  GET  /api/health    - Health check")
    print()
    app.run(host="127.0.0.1", port=5001, debug=True)


if __name__ == "__main__":
    main()
