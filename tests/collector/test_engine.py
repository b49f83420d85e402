"""Tests for schema usage extraction from operation documents."""

from __future__ import annotations

import json

import pytest
from graphql import GraphQLSchema, parse

from gql_usage.collector.engine import (
    OperationCollector,
    SchemaMismatchError,
    create_collector,
    md5_hash,
)
from tests.conftest import DELETE_PROJECT

PROJECT_TYPES = [
    "ProjectType.FEDERATION",
    "ProjectType.STITCHING",
    "ProjectType.SINGLE",
    "ProjectType.CUSTOM",
]

GET_PROJECTS = """
  query getProjects($limit: Int!, $type: ProjectType!) {
    projects(filter: { pagination: { limit: $limit }, type: $type }) {
      id
    }
  }
"""


class TestSelectedFields:
    def test_collect_fields(self, schema: GraphQLSchema):
        collect = create_collector(schema)
        info = collect(parse(DELETE_PROJECT), {})

        assert "Mutation.deleteProject" in info.fields
        assert "Mutation.deleteProject.selector" in info.fields
        assert "DeleteProjectPayload.selector" in info.fields
        assert "ProjectSelector.organization" in info.fields
        assert info.operation_name == "deleteProject"

    def test_fields_reached_through_fragments(self, schema: GraphQLSchema):
        info = create_collector(schema)(parse(DELETE_PROJECT), {})

        for field in ("Project.id", "Project.cleanId", "Project.name", "Project.type"):
            assert field in info.fields
        assert "Project.buildUrl" not in info.fields

    def test_interface_and_inline_fragment(self, schema: GraphQLSchema):
        info = create_collector(schema)(
            parse('{ node(id: "1") { id ... on Project { name } } }'), None
        )

        assert "Query.node" in info.fields
        assert "Query.node.id" in info.fields
        assert "Node.id" in info.fields
        assert "Project.name" in info.fields
        assert "ID" in info.fields

    def test_typename(self, schema: GraphQLSchema):
        info = create_collector(schema)(parse("{ projects { __typename } }"), None)
        assert "Project.__typename" in info.fields

    def test_fields_are_unique_and_sorted(self, schema: GraphQLSchema):
        info = create_collector(schema)(
            parse("{ a: projects { id } b: projects { id name } }"), None
        )
        assert info.fields == sorted(set(info.fields))
        assert info.fields.count("Project.id") == 1


class TestInputTypes:
    def test_collect_input_object_types(self, schema: GraphQLSchema):
        info = create_collector(schema)(parse(DELETE_PROJECT), {})

        assert "ProjectSelectorInput.organization" in info.fields
        assert "ProjectSelectorInput.project" in info.fields
        assert "ID" in info.fields

    def test_collect_enums_and_scalars_as_inputs(self, schema: GraphQLSchema):
        info = create_collector(schema)(parse(GET_PROJECTS), {})

        assert "Int" in info.fields
        for value in PROJECT_TYPES:
            assert value in info.fields
        assert info.operation_name == "getProjects"

    def test_collect_enum_values_from_object_fields(self, schema: GraphQLSchema):
        info = create_collector(schema)(
            parse(
                """
                query getProjects($limit: Int!) {
                  projects(filter: { pagination: { limit: $limit }, type: FEDERATION }) {
                    id
                  }
                }
                """
            ),
            {},
        )

        assert "Int" in info.fields
        assert "ProjectType.FEDERATION" in info.fields
        assert "ProjectType.STITCHING" not in info.fields
        assert "ProjectType.SINGLE" not in info.fields
        assert "ProjectType.CUSTOM" not in info.fields

    def test_collect_enum_values_from_arguments(self, schema: GraphQLSchema):
        info = create_collector(schema)(
            parse("query getProjects { projectsByType(type: FEDERATION) { id } }"), {}
        )

        assert "Query.projectsByType.type" in info.fields
        assert "ProjectType.FEDERATION" in info.fields
        assert "ProjectType" not in info.fields
        assert "ProjectType.STITCHING" not in info.fields

    def test_enum_list_literal_marks_whole_enum(self, schema: GraphQLSchema):
        info = create_collector(schema)(
            parse("{ projectsByTypes(types: [FEDERATION, SINGLE]) { id } }"), None
        )
        for value in PROJECT_TYPES:
            assert value in info.fields

    def test_collect_arguments(self, schema: GraphQLSchema):
        info = create_collector(schema)(parse(GET_PROJECTS), {})
        assert "Query.projects.filter" in info.fields

    def test_collect_used_only_input_fields(self, schema: GraphQLSchema):
        info = create_collector(schema)(parse(GET_PROJECTS), {})

        assert "FilterInput.type" in info.fields
        assert "FilterInput.pagination" in info.fields
        assert "PaginationInput.limit" in info.fields
        assert "PaginationInput.offset" not in info.fields
        assert "FilterInput.order" not in info.fields

    def test_input_passed_as_variable_is_marked_entirely(self, schema: GraphQLSchema):
        info = create_collector(schema)(
            parse(
                """
                query getProjects($pagination: PaginationInput!, $type: ProjectType!) {
                  projects(filter: { pagination: $pagination, type: $type }) {
                    id
                  }
                }
                """
            ),
            {},
        )

        assert "FilterInput.pagination" in info.fields
        assert "FilterInput.type" in info.fields
        assert "PaginationInput.limit" in info.fields
        assert "PaginationInput.offset" in info.fields

    def test_nested_list_literal_keeps_field_granularity(self, schema: GraphQLSchema):
        info = create_collector(schema)(
            parse('{ sorted(orderGroups: [[{ field: "name" }]]) { id } }'), None
        )

        assert "Query.sorted.orderGroups" in info.fields
        assert "ProjectOrderByInput.field" in info.fields
        assert "String" in info.fields
        assert "ProjectOrderByInput.direction" not in info.fields
        assert "OrderDirection.ASC" not in info.fields


class TestCyclicInputTypes:
    def test_whole_cyclic_type_terminates(self, schema: GraphQLSchema):
        info = create_collector(schema)(
            parse("query t($f: TreeFilterInput) { tree(filter: $f) { id } }"), None
        )

        assert {
            "TreeFilterInput.and",
            "TreeFilterInput.name",
            "TreeFilterInput.node",
            "NodeFilterInput.parent",
            "NodeFilterInput.depth",
            "String",
            "Int",
        } <= set(info.fields)

    def test_cyclic_type_from_values(self, schema: GraphQLSchema):
        collect = create_collector(schema, process_variables=True)
        info = collect(
            parse("query t($f: TreeFilterInput) { tree(filter: $f) { id } }"),
            {"f": {"and": [{"name": "x"}], "node": {"parent": {"node": None}}}},
        )

        assert "TreeFilterInput.and" in info.fields
        assert "TreeFilterInput.name" in info.fields
        assert "TreeFilterInput.node" in info.fields
        assert "NodeFilterInput.parent" in info.fields
        assert "NodeFilterInput" in info.fields
        assert "NodeFilterInput.depth" not in info.fields


class TestDirectives:
    def test_skips_argument_directives(self, schema: GraphQLSchema):
        info = create_collector(schema)(
            parse(
                """
                query getProjects($limit: Int!, $type: ProjectType!, $includeName: Boolean!) {
                  projects(filter: { pagination: { limit: $limit }, type: $type }) {
                    id
                    ...NestedFragment
                  }
                }

                fragment NestedFragment on Project {
                  ...IncludeNameFragment @include(if: $includeName)
                }

                fragment IncludeNameFragment on Project {
                  name
                }
                """
            ),
            {},
        )

        assert "Query.projects.filter" in info.fields
        assert "Project.name" in info.fields

    @pytest.mark.parametrize("directive", ["@include(if: true)", "@skip(if: false)"])
    def test_directive_arguments_never_counted(self, schema: GraphQLSchema, directive: str):
        info = create_collector(schema)(
            parse(f"{{ projects {{ id name {directive} }} }}"), None
        )

        assert "Project.name" in info.fields
        assert "Project.name.if" not in info.fields
        assert "Boolean" not in info.fields


class TestProcessVariables:
    def test_collect_used_only_input_fields(self, schema: GraphQLSchema):
        collect = create_collector(schema, process_variables=True)
        info = collect(
            parse(
                """
                query getProjects($pagination: PaginationInput!, $type: ProjectType!) {
                  projects(filter: { pagination: $pagination, type: $type }) {
                    id
                  }
                }
                """
            ),
            {"pagination": {"limit": 1}, "type": "STITCHING"},
        )

        assert "FilterInput.pagination" in info.fields
        assert "FilterInput.type" in info.fields
        assert "PaginationInput.limit" in info.fields
        assert "PaginationInput.offset" not in info.fields

    def test_missing_variable_marks_bare_input_type(self, schema: GraphQLSchema):
        collect = create_collector(schema, process_variables=True)
        info = collect(
            parse(
                """
                query getProjects($pagination: PaginationInput, $type: ProjectType!) {
                  projects(filter: { pagination: $pagination, type: $type }) {
                    id
                  }
                }
                """
            ),
            {"type": "STITCHING"},
        )

        assert "FilterInput.pagination" in info.fields
        assert "FilterInput.type" in info.fields
        assert "PaginationInput" in info.fields
        assert "PaginationInput.offset" not in info.fields
        assert "PaginationInput.limit" not in info.fields

    def test_used_only_fields_from_a_list(self, schema: GraphQLSchema):
        collect = create_collector(schema, process_variables=True)
        info = collect(
            parse("query getProjects($filter: FilterInput) { projects(filter: $filter) { id } }"),
            {
                "filter": {
                    "order": [
                        {"field": "name"},
                        {"field": "buildUrl", "direction": "DESC"},
                    ],
                    "pagination": {"limit": 10},
                }
            },
        )

        assert "FilterInput.pagination" in info.fields
        assert "PaginationInput.limit" in info.fields
        assert "FilterInput.order" in info.fields
        assert "ProjectOrderByInput.field" in info.fields
        assert "ProjectOrderByInput.direction" in info.fields
        assert "FilterInput.type" not in info.fields
        assert "PaginationInput.offset" not in info.fields

    def test_nested_lists_of_values(self, schema: GraphQLSchema):
        collect = create_collector(schema, process_variables=True)
        info = collect(
            parse(
                "query s($groups: [[ProjectOrderByInput!]!]) { sorted(orderGroups: $groups) { id } }"
            ),
            {"groups": [[{"direction": "ASC"}]]},
        )

        assert "ProjectOrderByInput.direction" in info.fields
        assert "OrderDirection.ASC" in info.fields
        assert "ProjectOrderByInput.field" not in info.fields

    def test_unknown_value_keys_are_ignored(self, schema: GraphQLSchema):
        collect = create_collector(schema, process_variables=True)
        info = collect(
            parse("query p($p: PaginationInput) { projects(filter: { pagination: $p }) { id } }"),
            {"p": {"limit": 1, "page": 3}},
        )

        assert "PaginationInput.limit" in info.fields
        assert "PaginationInput.page" not in info.fields

    def test_scalar_only_variables_match_unprocessed_result(self, schema: GraphQLSchema):
        variables = {"pagination": {"limit": 1}, "type": "STITCHING"}
        plain = create_collector(schema)(parse(GET_PROJECTS), None)
        processed = create_collector(schema, process_variables=True)(
            parse(GET_PROJECTS), variables
        )

        assert processed.fields == plain.fields
        assert "PaginationInput.offset" not in processed.fields

    def test_without_variables_marks_whole_types(self, schema: GraphQLSchema):
        collect = create_collector(schema, process_variables=True)
        info = collect(
            parse("query p($p: PaginationInput) { projects(filter: { pagination: $p }) { id } }"),
            None,
        )

        assert "PaginationInput.limit" in info.fields
        assert "PaginationInput.offset" in info.fields


class TestOperationDefinition:
    def test_anonymous_operation_has_no_name(self, schema: GraphQLSchema):
        info = create_collector(schema)(parse("{ projects { id } }"), None)
        assert info.operation_name is None

    def test_fragment_only_document(self, schema: GraphQLSchema):
        info = create_collector(schema)(parse("fragment F on Project { id name }"), None)

        assert info.operation_name is None
        assert info.key
        assert info.fields == ["Project.id", "Project.name"]

    def test_operation_is_normalized(self, schema: GraphQLSchema):
        info = create_collector(schema)(
            parse('query q { p: project(selector: { organization: "a", project: "b" }) { id } }'),
            None,
        )
        assert info.operation == 'query q{project(selector:{organization:"" project:""}){id}}'

    def test_key_ignores_literals_and_aliases(self, schema: GraphQLSchema):
        collect = create_collector(schema)
        first = collect(
            parse('query q { project(selector: { organization: "a", project: "b" }) { id } }')
        )
        second = collect(
            parse(
                'query q {\n  p: project(selector: { project: "d", organization: "c" }) { id }\n}'
            )
        )
        other = collect(parse("query q { projects { id } }"))

        assert first.key == second.key
        assert first.key != other.key

    def test_default_key_is_md5_of_json_text(self, schema: GraphQLSchema):
        info = create_collector(schema)(parse("{ projects { id } }"), None)
        assert info.key == md5_hash(json.dumps(info.operation))

    def test_custom_key_hash_fn(self, schema: GraphQLSchema):
        seen: list[str] = []

        def hash_fn(item: str) -> str:
            seen.append(item)
            return "custom"

        info = create_collector(schema, key_hash_fn=hash_fn)(parse("{ projects { id } }"), None)
        assert info.key == "custom"
        assert seen == [json.dumps(info.operation)]

    def test_idempotent(self, schema: GraphQLSchema):
        collector = OperationCollector(schema)
        document = parse(DELETE_PROJECT)
        assert collector.collect(document, None) == collector.collect(document, None)

    def test_accepts_source_text(self, schema: GraphQLSchema):
        info = OperationCollector(schema).collect("{ projects { id } }")
        assert info.fields == ["Project.id", "Query.projects"]

    def test_dump_uses_wire_names(self, schema: GraphQLSchema):
        info = create_collector(schema)(parse(DELETE_PROJECT), None)
        data = info.model_dump(by_alias=True)
        assert data["operationName"] == "deleteProject"
        assert set(data) == {"key", "operation", "operationName", "fields"}


class TestSchemaMismatch:
    def test_unknown_field(self, schema: GraphQLSchema):
        with pytest.raises(SchemaMismatchError) as exc_info:
            create_collector(schema)(parse("{ unknownField }"), None)
        assert exc_info.value.details["name"] == "unknownField"

    def test_unknown_input_field(self, schema: GraphQLSchema):
        with pytest.raises(SchemaMismatchError):
            create_collector(schema)(
                parse("{ projects(filter: { page: 1 }) { id } }"), None
            )
