"""Shared test fixtures for gql-usage tests."""

from __future__ import annotations

import pytest
from graphql import GraphQLSchema, build_schema

from gql_usage.formats.usage_report import OperationDefinition

SCHEMA_SDL = """
  type Query {
    project(selector: ProjectSelectorInput!): Project
    projectsByType(type: ProjectType!): [Project!]!
    projectsByTypes(types: [ProjectType!]!): [Project!]!
    projects(filter: FilterInput): [Project!]!
    sorted(orderGroups: [[ProjectOrderByInput!]!]): [Project!]!
    tree(filter: TreeFilterInput): [Project!]!
    node(id: ID!): Node
  }

  type Mutation {
    deleteProject(selector: ProjectSelectorInput!): DeleteProjectPayload!
  }

  input ProjectSelectorInput {
    organization: ID!
    project: ID!
  }

  input FilterInput {
    type: ProjectType
    pagination: PaginationInput
    order: [ProjectOrderByInput!]
  }

  input PaginationInput {
    limit: Int
    offset: Int
  }

  input ProjectOrderByInput {
    field: String!
    direction: OrderDirection
  }

  input TreeFilterInput {
    and: [TreeFilterInput!]
    name: String
    node: NodeFilterInput
  }

  input NodeFilterInput {
    parent: TreeFilterInput
    depth: Int
  }

  enum OrderDirection {
    ASC
    DESC
  }

  type ProjectSelector {
    organization: ID!
    project: ID!
  }

  type DeleteProjectPayload {
    selector: ProjectSelector!
    deletedProject: Project!
  }

  interface Node {
    id: ID!
  }

  type Project implements Node {
    id: ID!
    cleanId: ID!
    name: String!
    type: ProjectType!
    buildUrl: String
    validationUrl: String
  }

  enum ProjectType {
    FEDERATION
    STITCHING
    SINGLE
    CUSTOM
  }
"""

DELETE_PROJECT = """
  mutation deleteProject($selector: ProjectSelectorInput!) {
    deleteProject(selector: $selector) {
      selector {
        organization
        project
      }
      deletedProject {
        ...ProjectFields
      }
    }
  }

  fragment ProjectFields on Project {
    id
    cleanId
    name
    type
  }
"""


@pytest.fixture
def schema() -> GraphQLSchema:
    return build_schema(SCHEMA_SDL)


def make_definition(
    key: str = "abc",
    operation: str = "query me {}",
    operation_name: str | None = "opName",
    fields: list[str] | None = None,
) -> OperationDefinition:
    """Helper to create an OperationDefinition with minimal boilerplate."""
    return OperationDefinition(
        key=key,
        operation=operation,
        operation_name=operation_name,
        fields=fields if fields is not None else ["fieldA"],
    )
