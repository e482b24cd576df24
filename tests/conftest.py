"""Pytest configuration and fixtures."""

import pytest

from protogetter.analyzers import Mode
from protogetter.config import Settings
from protogetter.parsers.go_parser import GoParser
from protogetter.services.analysis_service import AnalysisService
from protogetter.services.type_index import TypeIndexService

# Abridged protoc-gen-go output: messages for the current API, the legacy
# API, and a gogo "faster" message.
SAMPLE_GO_GENERATED = '''// Code generated by protoc-gen-go. DO NOT EDIT.
// source: user.proto

package pb

import (
	protoreflect "google.golang.org/protobuf/reflect/protoreflect"
	protoimpl "google.golang.org/protobuf/runtime/protoimpl"
)

type User struct {
	state         protoimpl.MessageState
	sizeCache     protoimpl.SizeCache
	unknownFields protoimpl.UnknownFields

	Name    string              `protobuf:"bytes,1,opt,name=name,proto3" json:"name,omitempty"`
	Age     int32               `protobuf:"varint,2,opt,name=age,proto3" json:"age,omitempty"`
	Profile *Profile            `protobuf:"bytes,3,opt,name=profile,proto3" json:"profile,omitempty"`
	Friends []*User             `protobuf:"bytes,4,rep,name=friends,proto3" json:"friends,omitempty"`
	Labels  map[string]*Profile `protobuf:"bytes,5,rep,name=labels,proto3" json:"labels,omitempty"`
	Raw     []byte
}

func (x *User) ProtoReflect() protoreflect.Message {
	return nil
}

func (x *User) GetName() string {
	if x != nil {
		return x.Name
	}
	return ""
}

func (x *User) GetAge() int32 {
	if x != nil {
		return x.Age
	}
	return 0
}

func (x *User) GetProfile() *Profile {
	if x != nil {
		return x.Profile
	}
	return nil
}

func (x *User) GetFriends() []*User {
	if x != nil {
		return x.Friends
	}
	return nil
}

func (x *User) GetLabels() map[string]*Profile {
	if x != nil {
		return x.Labels
	}
	return nil
}

type Profile struct {
	state protoimpl.MessageState

	Email   string
	Address *Address
}

func (x *Profile) ProtoReflect() protoreflect.Message {
	return nil
}

func (x *Profile) GetEmail() string {
	if x != nil {
		return x.Email
	}
	return ""
}

func (x *Profile) GetAddress() *Address {
	if x != nil {
		return x.Address
	}
	return nil
}

type Address struct {
	City string
}

func (x *Address) ProtoReflect() protoreflect.Message {
	return nil
}

func (x *Address) GetCity() string {
	if x != nil {
		return x.City
	}
	return ""
}

type LegacyUser struct {
	Name string
}

func (m *LegacyUser) Reset()      { *m = LegacyUser{} }
func (*LegacyUser) ProtoMessage() {}

func (m *LegacyUser) GetName() string {
	if m != nil {
		return m.Name
	}
	return ""
}

type GogoUser struct {
	Name string
}

func (*GogoUser) ProtoMessage() {}

func (m *GogoUser) MarshalToSizedBuffer(dAtA []byte) (int, error) {
	return 0, nil
}

func (m *GogoUser) GetName() string {
	return m.Name
}
'''

SAMPLE_GO_SERVICE = '''package service

import "example.com/gen/pb"

type Wrapper struct {
	User *pb.User
}

type Plain struct {
	Name string
}

func (p *Plain) GetName() string {
	return p.Name
}

func lookup(name string) *pb.Profile {
	return nil
}

func Describe(u *pb.User, w Wrapper, p *Plain) string {
	name := u.Name
	email := u.Profile.Email
	city := u.GetProfile().Address.City
	first := u.Friends[0].Name
	wrapped := w.User.Name
	plain := p.Name
	raw := u.Raw
	fromLookup := lookup(u.Name).Email
	for _, f := range u.Friends {
		name += f.Name
	}
	u.Age++
	u.Profile.Email = email
	ptr := &u.Name
	_ = ptr
	if u.Age > 18 {
		return name + email + city + first + wrapped + plain + string(raw) + fromLookup
	}
	return u.GetName()
}
'''

SAMPLE_GO_PARSE = '''// Package demo shows parsing.
package demo

func main() {
	// Code generated by hand, not a header.
	x := 1
	_ = x
}
'''


@pytest.fixture
def sample_go_generated():
    """Generated message declarations."""
    return SAMPLE_GO_GENERATED


@pytest.fixture
def sample_go_service():
    """Handwritten code reading message fields in every position."""
    return SAMPLE_GO_SERVICE


@pytest.fixture
def sample_go_parse():
    """Non-generated file with a misleading inner comment."""
    return SAMPLE_GO_PARSE


@pytest.fixture
def settings():
    return Settings()


@pytest.fixture
def go_parser():
    return GoParser()


@pytest.fixture
def analyze_go(settings):
    """Analyze handwritten Go code together with the generated messages."""
    service = AnalysisService(settings)

    def _analyze(code: str | dict[str, str], mode: Mode = Mode.STANDALONE):
        sources = {"pb/user.pb.go": SAMPLE_GO_GENERATED}
        if isinstance(code, dict):
            sources.update(code)
        else:
            sources["service/service.go"] = code
        return service.analyze_sources(sources, mode)

    return _analyze


@pytest.fixture
def parsed_package(go_parser):
    """Parse handwritten code with the generated messages and index both.

    Returns (go_file, type_index) for the handwritten file.
    """

    def _parse(code: str):
        generated = go_parser.parse(SAMPLE_GO_GENERATED, "pb/user.pb.go")
        go_file = go_parser.parse(code, "service/service.go")
        index = TypeIndexService().build_index([generated, go_file])
        return go_file, index

    return _parse


@pytest.fixture
def find_node():
    """Find the first node (pre-order) whose source text matches."""

    def _find(go_file, text: str, node_type: str | None = None):
        stack = [go_file.root]
        while stack:
            node = stack.pop()
            if go_file.text(node) == text and (node_type is None or node.type == node_type):
                return node
            stack.extend(reversed(node.named_children))
        raise AssertionError(f"no node {node_type or ''} with text {text!r}")

    return _find
