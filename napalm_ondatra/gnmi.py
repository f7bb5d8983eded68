# -*- coding: utf-8 -*-
# Copyright 2021 Nokia. All rights reserved.
#
# The contents of this file are licensed under the Apache License, Version 2.0
# (the "License"); you may not use this file except in compliance with the
# License. You may obtain a copy of the License at
#
# http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS, WITHOUT
# WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied. See the
# License for the specific language governing permissions and limitations under
# the License.
# SPDX-License-Identifier: Apache-2.0

"""gNMI subscription client for the device under test."""
import datetime
import logging
import os
import threading

import grpc
from google.protobuf import json_format
from napalm.base.exceptions import CommandErrorException, ConnectionException
from pygnmi.spec.v080 import gnmi_pb2
from pygnmi.spec.v080.gnmi_pb2_grpc import gNMIStub

from napalm_ondatra.genutil import notification_datapoints, path_to_str


class Subscription(object):
    """
    Iterable over the responses of a Subscribe RPC.

    Yields (datapoints, sync) tuples; sync is True for the sync response that
    follows the initial updates. The iteration ends when the RPC deadline
    expires or the subscription is cancelled.
    """

    def __init__(self, responses, done):
        self._responses = responses
        self._done = done

    def __iter__(self):
        try:
            for response in self._responses:
                if response.sync_response:
                    yield [], True
                elif response.HasField("update"):
                    recv = datetime.datetime.now(tz=datetime.timezone.utc)
                    yield notification_datapoints(response.update, recv), False
        except grpc.RpcError as e:
            if e.code() not in (grpc.StatusCode.DEADLINE_EXCEEDED, grpc.StatusCode.CANCELLED):
                raise CommandErrorException(
                    "gNMI subscription failed: {}".format(e.details())
                ) from e
        finally:
            self._done.set()

    def cancel(self):
        self._done.set()
        self._responses.cancel()


class GNMIClient(object):
    def __init__(self, hostname, username, password, timeout=60, optional_args=None):
        """Constructor."""
        self.hostname = hostname
        self.username = username
        self.password = password
        self.timeout = timeout

        self._stub = None
        self._channel = None
        self._metadata = None

        if optional_args is None:
            optional_args = {}
        self.gnmi_port = optional_args.get("gnmi_port", 57400)
        self.target = str(self.hostname) + ":" + str(self.gnmi_port)
        self.target_name = optional_args.get("target_name", "")
        self.insecure = optional_args.get("insecure", False)
        self.encoding = optional_args.get("encoding", "JSON_IETF")

        self.tls_ca = optional_args.get("tls_ca", "")
        self.tls_cert = optional_args.get("tls_cert", "")
        self.tls_key = optional_args.get("tls_key", "")

        if self.encoding not in ("JSON_IETF", "JSON", "PROTO"):
            logging.warning(
                f"Unusual gNMI encoding configured ({self.encoding}), typically JSON_IETF(default) is used"
            )
        if not self.insecure and not self.tls_ca:
            logging.warning(
                "Incompatible settings: insecure=False "
                + "requires certificate parameter 'tls_ca' to be set "
                + "when using self-signed certificates"
            )

    def open(self):
        try:
            certs = {}
            if self.tls_ca:
                certs["root_certificates"] = self._readFile(self.tls_ca)
            if self.tls_cert:
                certs["certificate_chain"] = self._readFile(self.tls_cert)
            if self.tls_key:
                certs["private_key"] = self._readFile(self.tls_key)

            # If not provided and 'insecure' flag is set, fetch CA cert from server
            if "root_certificates" not in certs and self.insecure:
                # Lazily import dependencies
                import ssl

                from cryptography import x509
                from cryptography.hazmat.backends import default_backend

                ssl_cert = ssl.get_server_certificate((self.hostname, self.gnmi_port)).encode("utf-8")
                certs["root_certificates"] = ssl_cert
                logging.warning("Using server certificate as root CA due to 'insecure' flag, not recommended for production use")
                if not self.target_name:
                    ssl_cert_deserialized = x509.load_pem_x509_certificate(ssl_cert, default_backend())
                    ssl_cert_common_names = ssl_cert_deserialized.subject.get_attributes_for_oid(x509.oid.NameOID.COMMON_NAME)
                    self.target_name = ssl_cert_common_names[0].value
                    logging.warning(f"ssl_target_name_override(={self.target_name}) is auto-discovered, should be used for testing only!")

            credentials = grpc.ssl_channel_credentials(**certs)
            self._metadata = [("username", self.username), ("password", self.password)]

            options = ()
            if self.target_name:
                options = (("grpc.ssl_target_name_override", self.target_name),)
            self._channel = grpc.secure_channel(
                target=self.target, credentials=credentials, options=options
            )
            self._stub = gNMIStub(self._channel)
        except ConnectionException:
            raise
        except Exception as e:
            logging.error("Error in gNMI connection to {} : {}".format(self.target, e))
            raise ConnectionException(e) from e

    def close(self):
        if not self._channel:
            logging.warning("No grpc channels created to close")
            return
        self._channel.close()
        self._channel = None
        self._stub = None

    def is_alive(self):
        if self._channel is None:
            return False
        try:
            grpc.channel_ready_future(self._channel).result(timeout=self.timeout)
        except grpc.FutureTimeoutError:
            return False
        return True

    @staticmethod
    def _readFile(filename):
        """
        Reads a binary certificate/key file
        Parameters:
            filename(str): absolute path, or a name relative to the system certificate dirs
        Returns:
            File content
        Raises:
            ConnectionException: file does not exist or read exceptions
        """
        path = "/etc/ssl:/etc/ssl/certs:/etc/ca-certificates"

        if filename.startswith("~"):
            filename = os.path.expanduser(filename)
        if not filename.startswith("/"):
            for entry in path.split(":"):
                if os.path.isfile(os.path.join(entry, filename)):
                    filename = os.path.join(entry, filename)
                    break
        if not os.path.isfile(filename):
            raise ConnectionException("Cert/keys file %s does not exist" % filename)
        try:
            with open(filename, "rb") as f:
                return f.read()
        except OSError as exc:
            raise ConnectionException(
                "Failed to read cert/keys file %s: %s" % (filename, exc)
            ) from exc

    def _subscribe_request(self, paths, mode):
        subscriptions = [
            gnmi_pb2.Subscription(
                path=json_format.ParseDict({"elem": p}, gnmi_pb2.Path()),
                mode=gnmi_pb2.TARGET_DEFINED,
            )
            for p in paths
        ]
        return gnmi_pb2.SubscribeRequest(
            subscribe=gnmi_pb2.SubscriptionList(
                subscription=subscriptions,
                mode=mode,
                encoding=gnmi_pb2.Encoding.Value(self.encoding),
            )
        )

    def _subscribe(self, paths, mode, timeout):
        if self._stub is None:
            raise ConnectionException("gNMI client to {} is not open".format(self.target))
        request = self._subscribe_request(paths, mode)
        done = threading.Event()

        def requests():
            yield request
            # Closing the request stream ends the subscription on some targets.
            done.wait()

        logging.debug(
            "Subscribing to {} ({})".format(
                ", ".join(path_to_str(p) for p in paths),
                gnmi_pb2.SubscriptionList.Mode.Name(mode),
            )
        )
        responses = self._stub.Subscribe(requests(), metadata=self._metadata, timeout=timeout)
        return Subscription(responses, done)

    def subscribe_once(self, paths):
        """Issues a ONCE subscription and returns every datapoint received before sync."""
        datapoints = []
        subscription = self._subscribe(paths, gnmi_pb2.SubscriptionList.ONCE, self.timeout)
        for batch, sync in subscription:
            if sync:
                subscription.cancel()
                break
            datapoints.extend(batch)
        return datapoints

    def subscribe_stream(self, paths, duration):
        """Issues a STREAM subscription that lasts at most duration seconds."""
        return self._subscribe(paths, gnmi_pb2.SubscriptionList.STREAM, duration)
