"""HTTP surface of the Remark42 MongoDB backend."""
