"""GraphQL SDL for the blog API, exported as `type_defs`."""

from ariadne import gql

type_defs = gql(
    """
    type Post {
      id: ID!
      title: String!
      content: String!
      author: String
      publish_date: String
    }

    type Query {
      posts: [Post]
      post(id: ID!): Post
      trophies(username: String!): String
    }

    type Mutation {
      createPost(title: String!, content: String!, author: String): Post
      updatePost(id: ID!, title: String, content: String, author: String): Post
      deletePost(id: ID!): Post
    }
    """
)
