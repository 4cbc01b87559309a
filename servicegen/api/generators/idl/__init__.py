"""Interface-definition backends: GraphQL SDL, protobuf (gRPC, Connect), Cap'n Proto, Thrift, Smithy."""
