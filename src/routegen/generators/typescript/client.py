from __future__ import annotations

from typing import Sequence

from routegen.config.settings import TypeScriptConfig
from routegen.generators.typescript.imports import TypeImportCollector
from routegen.generators.typescript.naming import TsRoute, ts_field_name
from routegen.utils.paths import is_param_segment, path_segments

HEADER = "// Auto-generated by routegen. Do not edit by hand."

_ERROR_TYPES = '''// Base error type that comes from the server
export type RawApiError = {
  error: string;
  description: string;
};

// Parsed error type with structured details
export type ApiError<TDetails = unknown> = RawApiError & {
  details: TDetails;
};

// Common error details structure for Bad Request errors
export type BadRequestErrorDetails = {
  code: string;
  message: string;
};

// Type guard to check if error is a Bad Request with structured details
export function isBadRequestError(error: unknown): error is ApiError<BadRequestErrorDetails> {
  return (
    typeof error === "object" &&
    error !== null &&
    "error" in error &&
    (error as RawApiError).error === "Bad Request" &&
    "details" in error &&
    typeof (error as any).details === "object" &&
    (error as any).details !== null &&
    "code" in (error as any).details &&
    "message" in (error as any).details
  );
}'''

_QUERY_HELPER = '''function toQueryString(query?: object): string {
  if (!query) {
    return "";
  }
  const search = new URLSearchParams();
  for (const [key, value] of Object.entries(query)) {
    if (value === undefined || value === null) {
      continue;
    }
    if (Array.isArray(value)) {
      value.forEach((item) => search.append(key, String(item)));
    } else {
      search.append(key, String(value));
    }
  }
  const qs = search.toString();
  return qs ? "?" + qs : "";
}'''

_API_CLIENT = '''type RequestOptions = { requiresAuth?: boolean; signal?: AbortSignal };

// Base HTTP client with authentication support
export class ApiClient {
  private baseUrl: string = "";
  private getToken?: () => Promise<string | null>;

  constructor(config?: { baseUrl?: string; getToken?: () => Promise<string | null> }) {
    this.baseUrl = config?.baseUrl || "";
    this.getToken = config?.getToken;
  }

  async request<T, E = ApiError>(url: string, options: RequestInit & { requiresAuth?: boolean } = {}): Promise<T> {
    const { requiresAuth, ...init } = options;
    const headers = new Headers(init.headers as Record<string, string>);

    if (init.body && !headers.has("Content-Type")) {
      headers.set("Content-Type", "application/json");
    }

    if (requiresAuth && this.getToken) {
      const token = await this.getToken();
      if (token) {
        headers.set("Authorization", "Bearer " + token);
      }
    }

    const response = await fetch(this.baseUrl + url, { ...init, headers });

    if (!response.ok) {
      const rawError = (await response.json()) as RawApiError;
      throw this.transformError(rawError) as E;
    }

    if (response.status === 204) {
      return null as T;
    }

    return response.json() as Promise<T>;
  }

  private transformError(rawError: RawApiError): ApiError {
    if (rawError.error === "Bad Request" && rawError.description) {
      try {
        const details = JSON.parse(rawError.description) as BadRequestErrorDetails;
        return { ...rawError, details };
      } catch (e) {
        console.warn("Failed to parse error description:", e);
        return { ...rawError, details: rawError.description };
      }
    }
    return { ...rawError, details: rawError.description };
  }

  async get<T, E = ApiError>(url: string, options: RequestOptions = {}): Promise<T> {
    return this.request<T, E>(url, { method: "GET", ...options });
  }

  async post<T, E = ApiError>(url: string, data?: unknown, options: RequestOptions = {}): Promise<T> {
    return this.send<T, E>("POST", url, data, options);
  }

  async put<T, E = ApiError>(url: string, data?: unknown, options: RequestOptions = {}): Promise<T> {
    return this.send<T, E>("PUT", url, data, options);
  }

  async patch<T, E = ApiError>(url: string, data?: unknown, options: RequestOptions = {}): Promise<T> {
    return this.send<T, E>("PATCH", url, data, options);
  }

  async delete<T, E = ApiError>(url: string, data?: unknown, options: RequestOptions = {}): Promise<T> {
    return this.send<T, E>("DELETE", url, data, options);
  }

  private async send<T, E>(method: string, url: string, data: unknown, options: RequestOptions): Promise<T> {
    return this.request<T, E>(url, {
      method,
      body: data !== undefined ? JSON.stringify(data) : undefined,
      ...options,
    });
  }
}'''

_CLIENT_METHODS = {"POST": "post", "PUT": "put", "PATCH": "patch", "DELETE": "delete"}


def ts_path_template(path: str) -> str:
    """
    /v1/widgets/{widget_id} -> `/v1/widgets/${encodeURIComponent(params.widgetId)}`
    """
    parts = []
    for seg in path_segments(path):
        if is_param_segment(seg):
            parts.append(f"${{encodeURIComponent(params.{ts_field_name(seg[1:-1])})}}")
        else:
            parts.append(seg)
    return "`/" + "/".join(parts) + "`"


def params_interface(entry: TsRoute) -> list[str]:
    lines = [f"export interface {entry.params_type} {{"]
    for field in entry.field_names:
        lines.append(f"  {field}: string;")
    lines.append("}")
    return lines


def method_arguments(entry: TsRoute) -> list[str]:
    """Call signature for one route, following the params/query/body presence matrix."""
    args = []
    if entry.params_type:
        args.append(f"params: {entry.params_type}")
    if entry.query_type:
        args.append(f"query: {entry.query_type}")
    if entry.body_type:
        args.append(f"body: {entry.body_type}")
    args.append("config?: { signal?: AbortSignal }")
    return args


def client_method(entry: TsRoute) -> list[str]:
    route = entry.route
    generics = f"<{entry.response_type}, {entry.error_union}>"
    auth = "true" if route.handler_info.requires_auth else "false"
    options = f"{{ requiresAuth: {auth}, signal: config?.signal }}"

    url = ts_path_template(route.path)
    if entry.query_type:
        url += " + toQueryString(query)"

    if entry.is_query:
        call = f"apiClient.get{generics}(url, {options})"
    else:
        verb = _CLIENT_METHODS.get(route.method, "post")
        body = "body" if entry.body_type else "undefined"
        call = f"apiClient.{verb}{generics}(url, {body}, {options})"

    return [
        f"  {entry.method_name}: async ({', '.join(method_arguments(entry))}): "
        f"Promise<{entry.response_type}> => {{",
        f"    const url = {url};",
        f"    return {call};",
        "  },",
    ]


def generate_client(ts_routes: Sequence[TsRoute], config: TypeScriptConfig) -> str:
    """Render client.ts: error types, ApiClient, param interfaces and the `client` object."""
    collector = TypeImportCollector().collect_from_routes(e.route for e in ts_routes)

    lines: list[str] = [HEADER]
    lines.append(f'import {{ {config.token_key} }} from "{config.token_module}";')
    lines.extend(collector.import_lines(config.bindings_path))
    lines.append("")

    for entry in ts_routes:
        if entry.params_type:
            lines.extend(params_interface(entry))
            lines.append("")

    lines.append(_ERROR_TYPES)
    lines.append("")

    if any(e.query_type for e in ts_routes):
        lines.append(_QUERY_HELPER)
        lines.append("")

    lines.append(_API_CLIENT)
    lines.append("")
    lines.append("// Default instance")
    lines.append("export const apiClient = new ApiClient({")
    lines.append("  getToken: async () => {")
    lines.append(f"    return localStorage.getItem({config.token_key});")
    lines.append("  },")
    lines.append("});")
    lines.append("")

    lines.append("// Client")
    lines.append("export const client = {")
    for entry in ts_routes:
        lines.extend(client_method(entry))
    lines.append("};")

    return "\n".join(lines) + "\n"
