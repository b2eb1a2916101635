"""etcd readiness signalling for CloudFormation-managed cluster nodes."""
